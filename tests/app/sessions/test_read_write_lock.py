"""Testes do lock de leitores/escritor."""

from __future__ import annotations

import threading
import time

from app.sessions import ReadWriteLock


def test_readers_share_the_lock() -> None:
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=2.0)

    def _reader() -> None:
        with lock.read():
            inside.wait()

    threads = [threading.Thread(target=_reader) for _ in range(2)]
    for thread in threads:
        thread.start()
    # Os dois leitores e o teste só passam da barreira juntos
    inside.wait()
    for thread in threads:
        thread.join(timeout=2.0)

    assert not any(thread.is_alive() for thread in threads)


def test_writer_excludes_readers() -> None:
    lock = ReadWriteLock()
    events: list[str] = []

    lock.acquire_write()
    reader = threading.Thread(target=lambda: (lock.acquire_read(), events.append("read"), lock.release_read()))
    reader.start()
    time.sleep(0.05)
    events.append("write-done")
    lock.release_write()
    reader.join(timeout=2.0)

    assert events == ["write-done", "read"]


def test_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    events: list[str] = []

    lock.acquire_read()

    def _writer() -> None:
        with lock.write():
            events.append("write")

    def _late_reader() -> None:
        with lock.read():
            events.append("late-read")

    writer = threading.Thread(target=_writer)
    writer.start()
    time.sleep(0.05)
    late_reader = threading.Thread(target=_late_reader)
    late_reader.start()
    time.sleep(0.05)

    assert events == []
    lock.release_read()
    writer.join(timeout=2.0)
    late_reader.join(timeout=2.0)

    assert events == ["write", "late-read"]
