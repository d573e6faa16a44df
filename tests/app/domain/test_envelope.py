"""Testes dos envelopes enviados ao webhook."""

from __future__ import annotations

from app.domain.envelope import (
    EventKind,
    message_envelope,
    qr_envelope,
    status_envelope,
)
from app.domain.events import MessageReceived
from fsm import InstanceStatus


def _message(**overrides) -> MessageReceived:
    fields = {
        "sender_user": "100",
        "sender_jid": "100@s.whatsapp.net",
        "chat_jid": "120363000000000000@g.us",
        "is_from_me": False,
        "message_id": "3EB0ABC",
        "timestamp": 1_700_000_000,
        "push_name": "Fulano",
        "message": {"conversation": "oi"},
    }
    fields.update(overrides)
    return MessageReceived(**fields)


def test_qr_envelope_shape() -> None:
    assert qr_envelope("111", "abc").to_dict() == {
        "instanceId": "111",
        "event": "qr",
        "data": {"code": "abc"},
    }


def test_status_envelope_shape() -> None:
    envelope = status_envelope("111", InstanceStatus.DISCONNECTED)

    assert envelope.event is EventKind.STATUS
    assert envelope.to_dict()["data"] == {"status": "DISCONNECTED"}


def test_message_envelope_uses_chat_as_remote_jid() -> None:
    data = message_envelope("111", _message()).to_dict()["data"]

    assert data == {
        "key": {"remoteJid": "120363000000000000@g.us", "fromMe": False, "id": "3EB0ABC"},
        "message": {"conversation": "oi"},
        "pushName": "Fulano",
        "messageTimestamp": 1_700_000_000,
    }


def test_message_envelope_falls_back_to_sender() -> None:
    data = message_envelope("111", _message(chat_jid="")).to_dict()["data"]

    assert data["key"]["remoteJid"] == "100@s.whatsapp.net"
    assert isinstance(data["messageTimestamp"], int)
