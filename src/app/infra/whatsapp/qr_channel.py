"""Canal de QR codes alimentado por callbacks da biblioteca.

A biblioteca entrega cada código novo por callback em thread própria;
o leitor da instância consome o canal como um iterador bloqueante, que
termina quando o canal é fechado (pareamento concluído ou desconexão).
"""

from __future__ import annotations

import queue
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from app.domain.events import QrItem

_CLOSED = object()


class QrChannel:
    """Fila thread-safe de QrItem com fechamento idempotente."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[object] = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, item: QrItem) -> bool:
        """Publica um item; retorna False se o canal já foi fechado."""
        with self._lock:
            if self._closed:
                return False
            self._queue.put(item)
            return True

    def close(self) -> None:
        """Encerra o canal; leitores terminam após drenar o que já chegou."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[QrItem]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]
