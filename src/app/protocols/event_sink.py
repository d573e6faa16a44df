"""Protocolo do destino de envelopes (webhook)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.envelope import EventEnvelope


class EventSinkProtocol(Protocol):
    """Recebe envelopes sem bloquear o chamador.

    Pode ser chamado de qualquer thread (callbacks da biblioteca).
    """

    def dispatch(self, envelope: EventEnvelope) -> None: ...

    def release(self, instance_id: str) -> None:
        """Libera recursos da instância removida, após os envelopes pendentes."""
        ...
