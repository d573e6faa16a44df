"""Dispatcher de envelopes para o webhook do backend.

Best-effort: erros de transporte e respostas não-2xx são logados e
descartados, sem retry. `dispatch()` nunca bloqueia o chamador e pode
ser chamado de qualquer thread (callbacks da biblioteca chegam em
threads próprias); o envio acontece no event loop do processo.

Ordem: cada instância tem uma fila própria drenada por uma única task,
então os envelopes de uma instância chegam na ordem em que foram
despachados. Entre instâncias não há ordem garantida.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from config.logging import log_dropped
from utils.errors import WebhookError

if TYPE_CHECKING:
    from app.domain.envelope import EventEnvelope

logger = logging.getLogger(__name__)

COMPONENT = "webhook_dispatcher"
JSON_HEADERS = {"Content-Type": "application/json"}


class WebhookDispatcher:
    """POST JSON fire-and-forget com fila ordenada por instância."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 10.0,
        queue_size: int = 1000,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout_seconds
        self._queue_size = queue_size
        self._client = client
        self._owns_client = client is None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queues: dict[str, asyncio.Queue[EventEnvelope | None]] = {}
        self._workers: dict[str, asyncio.Task[None]] = {}
        self._sealed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def started(self) -> bool:
        return self._loop is not None and self._client is not None

    @property
    def active_instances(self) -> frozenset[str]:
        """Instâncias com fila e worker vivos."""
        return frozenset(self._queues)

    async def start(self) -> None:
        """Vincula o dispatcher ao event loop corrente."""
        self._loop = asyncio.get_running_loop()
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        logger.info("webhook_dispatcher_started", extra={"webhook_url": self._url})

    def dispatch(self, envelope: EventEnvelope) -> None:
        """Agenda o envio do envelope. Thread-safe e não bloqueante."""
        if self._sealed:
            log_dropped(logger, COMPONENT, "sealed", envelope.instance_id, envelope.event.value)
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            log_dropped(logger, COMPONENT, "not_started", envelope.instance_id, envelope.event.value)
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            self._enqueue(envelope)
        else:
            loop.call_soon_threadsafe(self._enqueue, envelope)

    def _enqueue(self, envelope: EventEnvelope) -> None:
        if self._sealed:
            log_dropped(logger, COMPONENT, "sealed", envelope.instance_id, envelope.event.value)
            return

        instance_id = envelope.instance_id
        queue = self._queues.get(instance_id)
        if queue is None:
            queue = asyncio.Queue(maxsize=self._queue_size)
            self._queues[instance_id] = queue
            task = asyncio.create_task(
                self._drain(instance_id, queue),
                name=f"webhook-{instance_id}",
            )
            task.add_done_callback(self._on_worker_done)
            self._workers[instance_id] = task

        try:
            queue.put_nowait(envelope)
        except asyncio.QueueFull:
            log_dropped(logger, COMPONENT, "queue_full", instance_id, envelope.event.value)

    def release(self, instance_id: str) -> None:
        """Libera fila e worker da instância depois dos envelopes pendentes.

        Thread-safe. Chamado quando a instância sai do registry; um
        envelope posterior para o mesmo id cria uma fila nova.
        """
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            self._release(instance_id)
        else:
            loop.call_soon_threadsafe(self._release, instance_id)

    def _release(self, instance_id: str) -> None:
        queue = self._queues.get(instance_id)
        if queue is None:
            return
        # Marcador na própria fila: o worker só sai depois do que já estava nela
        try:
            queue.put_nowait(None)
        except asyncio.QueueFull:
            logger.warning("webhook_release_deferred", extra={"instance_id": instance_id})

    def _retire(self, instance_id: str, queue: asyncio.Queue[EventEnvelope | None]) -> None:
        if self._queues.get(instance_id) is queue:
            del self._queues[instance_id]
            self._workers.pop(instance_id, None)
            logger.debug("webhook_worker_released", extra={"instance_id": instance_id})

    async def _drain(self, instance_id: str, queue: asyncio.Queue[EventEnvelope | None]) -> None:
        while True:
            envelope = await queue.get()
            try:
                if envelope is None:
                    if queue.empty():
                        self._retire(instance_id, queue)
                        return
                    continue
                await self.post(envelope)
            except Exception as exc:  # noqa: BLE001
                # Falha inesperada perde só este envelope; o worker segue
                logger.exception(
                    "webhook_delivery_crashed",
                    extra={"instance_id": instance_id, "error_type": type(exc).__name__},
                )
            finally:
                queue.task_done()

    def _on_worker_done(self, task: asyncio.Task[Any]) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "webhook_worker_failed",
                    extra={"error_type": type(exc).__name__, "worker": task.get_name()},
                )

    @staticmethod
    def encode(envelope: EventEnvelope) -> bytes:
        """Serializa o envelope.

        Raises:
            WebhookError: Se o payload não for serializável em JSON.
        """
        try:
            return json.dumps(envelope.to_dict(), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise WebhookError(f"Envelope não serializável: {exc}") from exc

    async def post(self, envelope: EventEnvelope) -> bool:
        """Envia um envelope agora. Retorna True em resposta 2xx.

        Nunca levanta: falhas viram log e o envelope é descartado.
        """
        if self._client is None:
            raise RuntimeError("WebhookDispatcher.start() não foi chamado")

        extra = {"instance_id": envelope.instance_id, "event": envelope.event.value}
        try:
            content = self.encode(envelope)
            response = await self._client.post(
                self._url,
                content=content,
                headers=JSON_HEADERS,
                timeout=self._timeout,
            )
        except WebhookError as exc:
            logger.error("webhook_payload_invalid", extra={**extra, "error": str(exc)})
            return False
        except httpx.HTTPError as exc:
            logger.warning(
                "webhook_post_failed",
                extra={**extra, "error_type": type(exc).__name__},
            )
            return False

        # Corpo já lido pelo client; aclose libera a conexão para o pool
        await response.aclose()

        if not response.is_success:
            logger.warning(
                "webhook_non_2xx",
                extra={**extra, "status_code": response.status_code},
            )
            return False

        logger.debug("webhook_delivered", extra={**extra, "status_code": response.status_code})
        return True

    async def flush(self, timeout_seconds: float = 5.0) -> None:
        """Aguarda as filas esvaziarem (até o timeout)."""
        queues = list(self._queues.values())
        if not queues:
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(
                asyncio.gather(*(queue.join() for queue in queues)),
                timeout=timeout_seconds,
            )

    def seal(self) -> None:
        """Para de aceitar envelopes (primeiro sinal de término)."""
        if not self._sealed:
            self._sealed = True
            logger.info("webhook_dispatcher_sealed")

    async def aclose(self) -> None:
        """Cancela workers pendentes e fecha o cliente HTTP."""
        self.seal()
        workers = list(self._workers.values())
        for task in workers:
            task.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)

        pending = sum(queue.qsize() for queue in self._queues.values())
        if pending:
            logger.warning("webhook_dispatcher_discarded", extra={"pending_envelopes": pending})

        self._workers.clear()
        self._queues.clear()

        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        logger.info("webhook_dispatcher_closed")
