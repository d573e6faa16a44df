"""Instância WhatsApp: um cliente da biblioteca e seu estado observável.

Escritas de `status` e `qr` acontecem sob o lock de escrita do registry,
e o envelope correspondente é despachado ainda sob o lock: o dispatcher
não bloqueia, então a ordem dos envelopes de uma instância é a ordem das
mudanças de estado, mesmo com o leitor de QR em outra thread.

Nenhum método do cliente é chamado com o lock em mãos: a biblioteca pode
disparar callbacks de forma síncrona.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from app.domain.envelope import message_envelope, qr_envelope, status_envelope
from app.domain.events import Connected, LoggedOut, MessageReceived, PairSuccess
from app.domain.jid import parse_jid
from app.observability import instance_scope
from fsm import InstanceStatus, create_status_machine
from utils.errors import ConnectError, EngineError, NotConnected

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.events import LibraryEvent
    from app.protocols import (
        DeviceHandle,
        EventSinkProtocol,
        MessagingClientProtocol,
        QrChannelProtocol,
        SendReceipt,
    )
    from app.services.sender_filter import SenderFilter
    from app.sessions.locks import ReadWriteLock

    QrPrinter = Callable[[str, str], None]

logger = logging.getLogger(__name__)


class WhatsAppInstance:
    """Uma conexão lógica, dona exclusiva do seu cliente."""

    def __init__(
        self,
        instance_id: str,
        client: MessagingClientProtocol,
        device: DeviceHandle,
        *,
        lock: ReadWriteLock,
        sink: EventSinkProtocol,
        sender_filter: SenderFilter,
        qr_printer: QrPrinter | None = None,
    ) -> None:
        self._id = instance_id
        self._client = client
        self._device = device
        self._lock = lock
        self._sink = sink
        self._filter = sender_filter
        self._qr_printer = qr_printer
        self._machine = create_status_machine(instance_id)
        self._qr = ""
        self._silenced = False
        self._handler_attached = False
        self._qr_reader: threading.Thread | None = None
        self._qr_channel: QrChannelProtocol | None = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def device(self) -> DeviceHandle:
        return self._device

    @property
    def status(self) -> InstanceStatus:
        """Status atual (quem lê deve segurar o lock de leitura)."""
        return self._machine.current

    @property
    def qr(self) -> str:
        return self._qr

    @property
    def qr_reader(self) -> threading.Thread | None:
        return self._qr_reader

    def snapshot(self) -> dict[str, Any]:
        """Visão serializável {id, status, qr}."""
        return {"id": self._id, "status": self._machine.current.value, "qr": self._qr}

    # ──────────────────────────────────────────────────────────────────
    # Eventos da biblioteca
    # ──────────────────────────────────────────────────────────────────

    def attach_handler(self) -> None:
        """Registra o handler único no cliente (antes de connect)."""
        if self._handler_attached:
            return
        self._client.add_event_handler(self._handle_event)
        self._handler_attached = True

    def _handle_event(self, event: LibraryEvent) -> None:
        # Callback em thread da biblioteca: falhas perdem só este evento
        with instance_scope(self._id):
            try:
                self._route_event(event)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "event_handler_failed",
                    extra={
                        "event_type": type(event).__name__,
                        "error_type": type(exc).__name__,
                    },
                )

    def _route_event(self, event: LibraryEvent) -> None:
        match event:
            case MessageReceived():
                self._on_message(event)
            case Connected():
                self._apply_status(InstanceStatus.CONNECTED, "connected")
            case LoggedOut(reason=reason):
                logger.info("instance_logged_out", extra={"reason": reason})
                self._apply_status(InstanceStatus.DISCONNECTED, "logged_out")
            case PairSuccess():
                logger.info("instance_paired")
            case _:
                logger.debug("library_event_ignored", extra={"event_type": type(event).__name__})

    def _on_message(self, event: MessageReceived) -> None:
        if self._silenced:
            return
        if event.is_from_me:
            logger.debug("message_filtered", extra={"reason": "from_me"})
            return
        if not self._filter.is_allowed(event.sender_user):
            logger.debug("message_filtered", extra={"reason": "sender_not_allowed"})
            return
        with self._lock.read():
            if self._silenced or self._machine.is_terminal:
                logger.debug("message_filtered", extra={"reason": "instance_disconnected"})
                return
            self._sink.dispatch(message_envelope(self._id, event))

    def _apply_status(self, target: InstanceStatus, trigger: str) -> None:
        with self._lock.write():
            if self._silenced:
                return
            previous = self._machine.current
            result = self._machine.transition(target, trigger)
            if not result.success:
                level = logging.DEBUG if self._machine.is_terminal else logging.WARNING
                logger.log(
                    level,
                    "status_transition_rejected",
                    extra={"from_status": previous.value, "to_status": target.value},
                )
                return
            if target is InstanceStatus.CONNECTED:
                self._qr = ""
            self._sink.dispatch(status_envelope(self._id, target))

        self._close_qr_channel()
        logger.info(
            "instance_status_changed",
            extra={"from_status": previous.value, "to_status": target.value, "trigger": trigger},
        )

    # ──────────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Obtém o canal de QR, conecta o cliente e inicia o leitor de QR.

        Raises:
            ConnectError: Se a biblioteca recusar a conexão.
        """
        channel = self._client.get_qr_channel()
        self._qr_channel = channel
        try:
            self._client.connect()
        except EngineError:
            channel.close()
            raise
        except Exception as exc:
            channel.close()
            raise ConnectError(f"Falha ao conectar: {exc}") from exc

        reader = threading.Thread(
            target=self._read_qr,
            args=(channel,),
            name=f"qr-reader-{self._id}",
            daemon=True,
        )
        self._qr_reader = reader
        reader.start()
        logger.info("instance_started", extra={"instance_id": self._id, "new_device": self._device.is_new})

    def _read_qr(self, channel: QrChannelProtocol) -> None:
        with instance_scope(self._id):
            for item in channel:
                if not item.is_code:
                    logger.info("qr_channel_outcome", extra={"qr_event": item.event})
                    continue
                if self._publish_qr(item.code) and self._qr_printer is not None:
                    try:
                        self._qr_printer(self._id, item.code)
                    except Exception as exc:  # noqa: BLE001
                        logger.warning("qr_print_failed", extra={"error_type": type(exc).__name__})
            logger.debug("qr_reader_finished")

    def _publish_qr(self, code: str) -> bool:
        with self._lock.write():
            if self._silenced or self._machine.current is not InstanceStatus.CONNECTING:
                return False
            self._qr = code
            self._sink.dispatch(qr_envelope(self._id, code))
        logger.info("qr_code_received")
        return True

    def _close_qr_channel(self) -> None:
        # Após CONNECTED ou DISCONNECTED nenhum código novo virá
        channel = self._qr_channel
        if channel is not None:
            channel.close()

    def mark_failed(self, reason: str) -> None:
        """Marca a instância como DISCONNECTED sem envelope (connect falhou).

        Deve ser chamado com o lock de escrita em mãos.
        """
        self._machine.transition(InstanceStatus.DISCONNECTED, reason)
        self._qr = ""

    def send(self, to: str, text: str) -> SendReceipt:
        """Envia texto para `to`.

        Raises:
            NotConnected: Se a instância não está CONNECTED.
            InvalidRecipient: Se `to` não é um JID válido.
            SendError: Se a biblioteca falhar no envio.
        """
        with self._lock.read():
            status = self._machine.current
        if status is not InstanceStatus.CONNECTED:
            raise NotConnected()

        recipient = parse_jid(to)
        receipt = self._client.send_text(recipient, text)
        logger.info(
            "message_sent",
            extra={"instance_id": self._id, "message_id": receipt.message_id},
        )
        return receipt

    def shutdown(self, *, silent: bool) -> None:
        """Desconecta o cliente e move para DISCONNECTED.

        Com `silent=True` (término do processo) nenhum envelope é emitido,
        nem agora nem por eventos tardios da biblioteca.
        """
        with self._lock.write():
            if silent:
                self._silenced = True
            previous = self._machine.current
            result = self._machine.transition(
                InstanceStatus.DISCONNECTED,
                "shutdown" if silent else "disconnect",
            )
            if result.success:
                self._qr = ""
                if not silent:
                    self._sink.dispatch(status_envelope(self._id, InstanceStatus.DISCONNECTED))

        self._client.disconnect()
        logger.info(
            "instance_disconnected",
            extra={
                "instance_id": self._id,
                "from_status": previous.value,
                "silent": silent,
            },
        )
