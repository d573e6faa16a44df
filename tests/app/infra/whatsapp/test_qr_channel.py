"""Testes do canal de QR alimentado por callbacks."""

from __future__ import annotations

import threading

from app.domain.events import QR_EVENT_CODE, QR_EVENT_TIMEOUT, QrItem
from app.infra.whatsapp import QrChannel


def test_iteration_ends_after_close() -> None:
    channel = QrChannel()
    channel.push(QrItem(event=QR_EVENT_CODE, code="abc"))
    channel.push(QrItem(event=QR_EVENT_TIMEOUT))
    channel.close()

    items = list(channel)

    assert [item.event for item in items] == [QR_EVENT_CODE, QR_EVENT_TIMEOUT]
    assert items[0].is_code
    assert not items[1].is_code


def test_push_after_close_is_rejected() -> None:
    channel = QrChannel()
    channel.close()
    channel.close()

    assert channel.closed
    assert channel.push(QrItem(event=QR_EVENT_CODE, code="late")) is False
    assert list(channel) == []


def test_reader_in_other_thread_sees_codes_in_order() -> None:
    channel = QrChannel()
    received: list[str] = []

    reader = threading.Thread(target=lambda: received.extend(item.code for item in channel))
    reader.start()
    for index in range(5):
        channel.push(QrItem(event=QR_EVENT_CODE, code=str(index)))
    channel.close()
    reader.join(timeout=2.0)

    assert not reader.is_alive()
    assert received == ["0", "1", "2", "3", "4"]
