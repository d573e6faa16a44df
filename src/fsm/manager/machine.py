"""
Máquina de status de uma instância WhatsApp.

Não é thread-safe: o dono (WhatsAppInstance) serializa as chamadas
sob o lock de escrita do registry.
"""

from typing import Any

from fsm.states.status import DEFAULT_INITIAL_STATUS, InstanceStatus, is_terminal
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StatusTransition, TransitionResult


class StatusMachine:
    """
    Status atual da instância e histórico de transições.

    Attributes:
        current: Status atual
        history: Transições aplicadas, em ordem
    """

    __slots__ = ("_current", "_history", "_instance_id")

    def __init__(
        self,
        instance_id: str = "",
        initial: InstanceStatus | None = None,
    ) -> None:
        self._current = initial or DEFAULT_INITIAL_STATUS
        self._history: list[StatusTransition] = []
        self._instance_id = instance_id

    @property
    def current(self) -> InstanceStatus:
        """Status atual."""
        return self._current

    @property
    def history(self) -> list[StatusTransition]:
        """Histórico de transições (cópia)."""
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._current)

    def can_transition_to(self, target: InstanceStatus) -> bool:
        return is_transition_valid(self._current, target)

    def transition(self, target: InstanceStatus, trigger: str) -> TransitionResult:
        """
        Tenta mover para `target`.

        Args:
            target: Status de destino
            trigger: Identificador do evento (ex: 'connected', 'shutdown')

        Returns:
            TransitionResult com sucesso/falha e o registro da transição
        """
        if not is_transition_valid(self._current, target):
            return TransitionResult(
                success=False,
                error_reason=f"Transição inválida: {self._current.name} → {target.name}",
            )

        transition = StatusTransition(
            from_status=self._current,
            to_status=target,
            trigger=trigger,
        )
        self._current = target
        self._history.append(transition)
        return TransitionResult(success=True, transition=transition)

    def get_summary(self) -> dict[str, Any]:
        """Resumo seguro para logs."""
        return {
            "instance_id": self._instance_id,
            "status": self._current.value,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.value for s in get_valid_targets(self._current)),
        }


def create_status_machine(
    instance_id: str,
    initial: InstanceStatus | None = None,
) -> StatusMachine:
    """Factory para nova máquina de status."""
    return StatusMachine(instance_id=instance_id, initial=initial)
