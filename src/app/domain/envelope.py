"""Envelopes enviados ao webhook.

Formato único para todos os eventos:
    {"instanceId": <id>, "event": "qr"|"status"|"message", "data": {...}}
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.events import MessageReceived
    from fsm import InstanceStatus


class EventKind(StrEnum):
    """Tipos de envelope."""

    QR = "qr"
    STATUS = "status"
    MESSAGE = "message"


@dataclass(frozen=True, slots=True)
class EventEnvelope:
    """Documento JSON postado no webhook."""

    instance_id: str
    event: EventKind
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "instanceId": self.instance_id,
            "event": self.event.value,
            "data": self.data,
        }


def qr_envelope(instance_id: str, code: str) -> EventEnvelope:
    return EventEnvelope(instance_id, EventKind.QR, {"code": code})


def status_envelope(instance_id: str, status: InstanceStatus) -> EventEnvelope:
    return EventEnvelope(instance_id, EventKind.STATUS, {"status": status.value})


def message_envelope(instance_id: str, event: MessageReceived) -> EventEnvelope:
    """Monta envelope de mensagem no formato key/message/pushName."""
    data = {
        "key": {
            "remoteJid": event.chat_jid or event.sender_jid,
            "fromMe": event.is_from_me,
            "id": event.message_id,
        },
        "message": event.message,
        "pushName": event.push_name,
        "messageTimestamp": int(event.timestamp),
    }
    return EventEnvelope(instance_id, EventKind.MESSAGE, data)
