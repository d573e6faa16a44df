"""
Transições válidas entre status de instância.

CONNECTED → CONNECTED representa reconexão feita pela biblioteca
(novo evento Connected) e gera novo envelope de status.
"""

from fsm.states.status import TERMINAL_STATUSES, InstanceStatus

TransitionMap = dict[InstanceStatus, frozenset[InstanceStatus]]

VALID_TRANSITIONS: TransitionMap = {
    # Pareando: conecta ou é deslogado antes de concluir
    InstanceStatus.CONNECTING: frozenset({
        InstanceStatus.CONNECTED,
        InstanceStatus.DISCONNECTED,
    }),

    # Conectado: reconexão da biblioteca ou logout
    InstanceStatus.CONNECTED: frozenset({
        InstanceStatus.CONNECTED,
        InstanceStatus.DISCONNECTED,
    }),

    # Terminal
    InstanceStatus.DISCONNECTED: frozenset(),
}


def get_valid_targets(status: InstanceStatus) -> frozenset[InstanceStatus]:
    """Retorna os status de destino permitidos (vazio se terminal)."""
    return VALID_TRANSITIONS.get(status, frozenset())


def is_transition_valid(source: InstanceStatus, target: InstanceStatus) -> bool:
    """Verifica se a transição source → target é permitida."""
    return target in get_valid_targets(source)


def validate_transition_map() -> list[str]:
    """
    Verifica consistência do mapa de transições.

    Returns:
        Lista de problemas encontrados (vazia = OK)
    """
    errors: list[str] = []

    for status in InstanceStatus:
        if status not in VALID_TRANSITIONS:
            errors.append(f"Status sem entrada no mapa: {status.name}")

    for status in TERMINAL_STATUSES:
        if VALID_TRANSITIONS.get(status):
            errors.append(f"Status terminal com saídas: {status.name}")

    return errors
