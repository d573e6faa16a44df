"""Protocolos e contratos do core da aplicação."""

from .credential_store import CredentialStoreProtocol
from .event_sink import EventSinkProtocol
from .messaging import (
    EventHandler,
    MessagingClientFactoryProtocol,
    MessagingClientProtocol,
    QrChannelProtocol,
)
from .models import DeviceHandle, SendReceipt

__all__ = [
    "CredentialStoreProtocol",
    "DeviceHandle",
    "EventHandler",
    "EventSinkProtocol",
    "MessagingClientFactoryProtocol",
    "MessagingClientProtocol",
    "QrChannelProtocol",
    "SendReceipt",
]
