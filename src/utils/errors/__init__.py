"""Exceções compartilhadas do engine."""

from .exceptions import (
    AlreadyConnected,
    AlreadyConnecting,
    ClientError,
    ConnectError,
    EngineError,
    InfrastructureError,
    InstanceNotFound,
    InvalidRecipient,
    NotConnected,
    OpenError,
    PayloadError,
    SendError,
    StoreError,
    WebhookError,
)

__all__ = [
    "AlreadyConnected",
    "AlreadyConnecting",
    "ClientError",
    "ConnectError",
    "EngineError",
    "InfrastructureError",
    "InstanceNotFound",
    "InvalidRecipient",
    "NotConnected",
    "OpenError",
    "PayloadError",
    "SendError",
    "StoreError",
    "WebhookError",
]
