"""Protocolos da biblioteca de mensagens consumidos pelo core.

O core só conhece estas capacidades: registrar handler, obter canal de QR,
conectar, desconectar e enviar texto.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.domain.events import LibraryEvent, QrItem
    from app.domain.jid import Jid
    from app.protocols.models import DeviceHandle, SendReceipt

EventHandler = Callable[["LibraryEvent"], None]


class QrChannelProtocol(Protocol):
    """Sequência finita e não reiniciável de itens de QR.

    A iteração termina quando o pareamento conclui ou o cliente desconecta.
    """

    def __iter__(self) -> Iterator[QrItem]: ...

    def close(self) -> None: ...


class MessagingClientProtocol(Protocol):
    """Cliente de uma conta WhatsApp."""

    def add_event_handler(self, handler: EventHandler) -> None: ...

    def get_qr_channel(self) -> QrChannelProtocol: ...

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...

    def send_text(self, recipient: Jid, text: str) -> SendReceipt: ...


class MessagingClientFactoryProtocol(Protocol):
    """Cria clientes vinculados a um device do store."""

    def create(self, instance_id: str, device: DeviceHandle) -> MessagingClientProtocol: ...
