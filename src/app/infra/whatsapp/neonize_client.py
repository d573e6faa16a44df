"""Adapter da biblioteca neonize (binding Python do whatsmeow).

Único módulo que importa neonize. Os eventos nativos (protobuf) são
traduzidos para app.domain.events antes de chegar ao core; os
callbacks rodam em threads da biblioteca.

O import de neonize é tardio: carregar o módulo nativo custa caro e os
testes usam clientes fake.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from google.protobuf.json_format import MessageToDict

from app.domain.events import (
    QR_EVENT_CODE,
    QR_EVENT_SUCCESS,
    Connected,
    LoggedOut,
    MessageReceived,
    PairSuccess,
    QrItem,
)
from app.infra.whatsapp.qr_channel import QrChannel
from app.protocols.models import DeviceHandle, SendReceipt
from utils.errors import ConnectError, SendError

if TYPE_CHECKING:
    from app.domain.events import LibraryEvent
    from app.domain.jid import Jid
    from app.protocols.messaging import EventHandler

logger = logging.getLogger(__name__)

# Epoch acima disso está em milissegundos
_MILLIS_THRESHOLD = 100_000_000_000

REASON_CONNECT_FAILED = "connect_failed"
REASON_CLIENT_STOPPED = "client_stopped"


def normalize_timestamp(value: Any) -> int:
    """Converte timestamp da biblioteca para epoch em segundos."""
    try:
        stamp = int(value or 0)
    except (TypeError, ValueError):
        return 0
    if stamp > _MILLIS_THRESHOLD:
        stamp //= 1000
    return stamp


def jid_to_string(jid: Any) -> str:
    """Formata um JID protobuf (User/Server/Device/RawAgent)."""
    if jid is None:
        return ""
    user = getattr(jid, "User", "") or ""
    server = getattr(jid, "Server", "") or ""
    if not user and not server:
        return ""
    agent = getattr(jid, "RawAgent", 0) or 0
    device = getattr(jid, "Device", 0) or 0
    if agent:
        user = f"{user}.{agent}"
    if device:
        user = f"{user}:{device}"
    return f"{user}@{server}"


def translate_message(event: Any) -> MessageReceived:
    """Converte um MessageEv nativo em MessageReceived."""
    info = event.Info
    source = info.MessageSource
    message = event.Message
    content = (
        MessageToDict(message)
        if message is not None and hasattr(message, "DESCRIPTOR")
        else {}
    )
    return MessageReceived(
        sender_user=source.Sender.User,
        sender_jid=jid_to_string(source.Sender),
        chat_jid=jid_to_string(source.Chat),
        is_from_me=bool(source.IsFromMe),
        message_id=info.ID,
        timestamp=normalize_timestamp(info.Timestamp),
        push_name=info.Pushname or "",
        message=content,
    )


def _build_device_jid(jid: str) -> Any:
    from neonize.proto.Neonize_pb2 import JID

    raw_user, _, server = jid.partition("@")
    user, _, device = raw_user.partition(":")
    user, _, agent = user.partition(".")
    return JID(
        User=user,
        Server=server,
        Device=int(device or 0),
        RawAgent=int(agent or 0),
        IsEmpty=False,
    )


class NeonizeMessagingClient:
    """Cliente de uma conta, conforme MessagingClientProtocol."""

    def __init__(self, instance_id: str, client: Any) -> None:
        self._instance_id = instance_id
        self._client = client
        self._handlers: list[EventHandler] = []
        self._qr_channel: QrChannel | None = None
        self._thread: threading.Thread | None = None
        self._register_callbacks()

    def _register_callbacks(self) -> None:
        from neonize.events import ConnectedEv, LoggedOutEv, MessageEv, PairStatusEv

        self._client.event(ConnectedEv)(self._on_connected)
        self._client.event(LoggedOutEv)(self._on_logged_out)
        self._client.event(MessageEv)(self._on_message)
        self._client.event(PairStatusEv)(self._on_pair_status)
        self._client.event.qr(self._on_qr)

    def _emit(self, event: LibraryEvent) -> None:
        for handler in list(self._handlers):
            handler(event)

    def _on_connected(self, _client: Any, _event: Any) -> None:
        self._emit(Connected())

    def _on_logged_out(self, _client: Any, event: Any) -> None:
        self._close_qr_channel()
        self._emit(LoggedOut(reason=str(getattr(event, "Reason", ""))))

    def _on_message(self, _client: Any, event: Any) -> None:
        try:
            message = translate_message(event)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "message_translation_failed",
                extra={"instance_id": self._instance_id, "error_type": type(exc).__name__},
            )
            return
        self._emit(message)

    def _on_pair_status(self, _client: Any, event: Any) -> None:
        jid = jid_to_string(getattr(event, "ID", None))
        channel = self._qr_channel
        if channel is not None:
            channel.push(QrItem(event=QR_EVENT_SUCCESS))
            channel.close()
        self._emit(PairSuccess(jid=jid))

    def _on_qr(self, _client: Any, data_qr: bytes) -> None:
        channel = self._qr_channel
        if channel is None:
            return
        code = data_qr.decode("utf-8") if isinstance(data_qr, bytes) else str(data_qr)
        channel.push(QrItem(event=QR_EVENT_CODE, code=code))

    def _close_qr_channel(self) -> None:
        if self._qr_channel is not None:
            self._qr_channel.close()

    def add_event_handler(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def get_qr_channel(self) -> QrChannel:
        """Canal de QR do próximo connect(); device já pareado não recebe códigos."""
        if self._qr_channel is None or self._qr_channel.closed:
            self._qr_channel = QrChannel()
        return self._qr_channel

    def connect(self) -> None:
        """Inicia o loop da biblioteca em thread daemon.

        Raises:
            ConnectError: Se a thread de conexão não puder ser iniciada.
        """
        if self._thread is not None and self._thread.is_alive():
            return
        thread = threading.Thread(
            target=self._run,
            name=f"whatsapp-{self._instance_id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as exc:
            raise ConnectError(f"Falha ao iniciar conexão: {exc}") from exc
        self._thread = thread

    def _run(self) -> None:
        reason = REASON_CLIENT_STOPPED
        try:
            self._client.connect()
        except Exception as exc:  # noqa: BLE001
            reason = REASON_CONNECT_FAILED
            logger.error(
                "whatsapp_client_crashed",
                extra={"instance_id": self._instance_id, "error_type": type(exc).__name__},
            )
        finally:
            self._close_qr_channel()

        # Fim do loop da biblioteca: a instância não tem mais conexão viva
        logger.info(
            "whatsapp_client_stopped",
            extra={"instance_id": self._instance_id, "reason": reason},
        )
        self._emit(LoggedOut(reason=reason))

    def disconnect(self) -> None:
        self._close_qr_channel()
        try:
            self._client.disconnect()
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "whatsapp_disconnect_failed",
                extra={"instance_id": self._instance_id, "error_type": type(exc).__name__},
            )

    def send_text(self, recipient: Jid, text: str) -> SendReceipt:
        """Envia texto simples.

        Raises:
            SendError: Se a biblioteca falhar no envio.
        """
        from neonize.utils.jid import build_jid

        target = build_jid(recipient.user, recipient.server)
        if recipient.device:
            target.Device = recipient.device
        try:
            response = self._client.send_message(target, text)
        except Exception as exc:  # noqa: BLE001
            raise SendError(f"Falha ao enviar mensagem: {exc}") from exc
        return SendReceipt(
            message_id=str(getattr(response, "ID", "") or ""),
            timestamp=normalize_timestamp(getattr(response, "Timestamp", 0)),
        )


class NeonizeClientFactory:
    """Cria clientes neonize sobre o arquivo do store de credenciais."""

    def __init__(self, db_path: str, log_level: str = "WARNING") -> None:
        self._db_path = db_path
        self._configure_library_logging(log_level)

    @staticmethod
    def _configure_library_logging(level: str) -> None:
        from neonize.utils import log as library_log

        library_log.setLevel(level.upper())

    def create(self, instance_id: str, device: DeviceHandle) -> NeonizeMessagingClient:
        """Cliente para o device informado.

        Raises:
            ConnectError: Se a biblioteca recusar a criação do cliente.
        """
        from neonize.client import NewClient

        try:
            if device.jid:
                native = NewClient(self._db_path, jid=_build_device_jid(device.jid))
            else:
                native = NewClient(self._db_path, uuid=device.uuid)
        except Exception as exc:  # noqa: BLE001
            raise ConnectError(f"Falha ao criar cliente: {exc}") from exc

        logger.debug(
            "whatsapp_client_created",
            extra={"instance_id": instance_id, "new_device": device.is_new},
        )
        return NeonizeMessagingClient(instance_id, native)
