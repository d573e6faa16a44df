"""Registry de instâncias WhatsApp do processo.

Mapa instance_id → WhatsAppInstance protegido por lock de leitores/
escritor. Leitores: list, get, send (só o lookup). Escritores: connect,
disconnect e as mudanças de status/qr das próprias instâncias.

Todas as operações são síncronas e podem bloquear (store, biblioteca);
a camada HTTP as executa via asyncio.to_thread.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.sessions.instance import WhatsAppInstance
from app.sessions.locks import ReadWriteLock
from fsm import InstanceStatus
from utils.errors import (
    AlreadyConnected,
    AlreadyConnecting,
    ConnectError,
    InstanceNotFound,
    NotConnected,
)

if TYPE_CHECKING:
    from app.protocols import (
        CredentialStoreProtocol,
        EventSinkProtocol,
        MessagingClientFactoryProtocol,
        SendReceipt,
    )
    from app.services.sender_filter import SenderFilter
    from app.sessions.instance import QrPrinter

logger = logging.getLogger(__name__)


class InstanceRegistry:
    """Dono exclusivo de todas as instâncias."""

    def __init__(
        self,
        store: CredentialStoreProtocol,
        factory: MessagingClientFactoryProtocol,
        sink: EventSinkProtocol,
        sender_filter: SenderFilter,
        *,
        qr_printer: QrPrinter | None = None,
    ) -> None:
        self._store = store
        self._factory = factory
        self._sink = sink
        self._filter = sender_filter
        self._qr_printer = qr_printer
        self._lock = ReadWriteLock()
        self._instances: dict[str, WhatsAppInstance] = {}

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._instances)

    def __contains__(self, instance_id: object) -> bool:
        with self._lock.read():
            return instance_id in self._instances

    def list(self) -> dict[str, dict[str, Any]]:
        """Snapshot {id: {id, status, qr}} consistente no instante da leitura."""
        with self._lock.read():
            return {
                instance_id: instance.snapshot()
                for instance_id, instance in self._instances.items()
            }

    def get(self, instance_id: str) -> dict[str, Any]:
        """Snapshot de uma instância.

        Raises:
            InstanceNotFound: Se o id não está no registry.
        """
        with self._lock.read():
            instance = self._instances.get(instance_id)
            if instance is None:
                raise InstanceNotFound()
            return instance.snapshot()

    def connect(self, instance_id: str) -> WhatsAppInstance:
        """Cria (ou recria) a instância e inicia a conexão.

        A entrada fica visível em list() antes de start() rodar.

        Raises:
            AlreadyConnected: Se a instância existente está CONNECTED.
            AlreadyConnecting: Se a instância existente está em pareamento.
            StoreError: Se o store de credenciais falhar.
            ConnectError: Se a biblioteca não conectar.
        """
        with self._lock.write():
            previous = self._instances.get(instance_id)
            if previous is not None:
                if previous.status is InstanceStatus.CONNECTED:
                    raise AlreadyConnected()
                if previous.status is InstanceStatus.CONNECTING:
                    raise AlreadyConnecting()

            device = self._store.get_device(instance_id)
            if device is None:
                device = self._store.new_device()
            client = self._factory.create(instance_id, device)

            instance = WhatsAppInstance(
                instance_id,
                client,
                device,
                lock=self._lock,
                sink=self._sink,
                sender_filter=self._filter,
                qr_printer=self._qr_printer,
            )
            instance.attach_handler()
            self._instances[instance_id] = instance

        logger.info(
            "instance_registered",
            extra={
                "instance_id": instance_id,
                "new_device": device.is_new,
                "replaced": previous is not None,
            },
        )

        # Cliente antigo (deslogado) não recebe mais eventos
        if previous is not None:
            previous.shutdown(silent=True)

        try:
            instance.start()
        except ConnectError:
            with self._lock.write():
                instance.mark_failed("connect_failed")
            logger.error("instance_connect_failed", extra={"instance_id": instance_id})
            raise
        return instance

    def send(self, instance_id: str, to: str, text: str) -> SendReceipt:
        """Envia texto pela instância.

        Raises:
            NotConnected: Se a instância não existe ou não está CONNECTED.
            InvalidRecipient: Se `to` não é um JID válido.
            SendError: Se a biblioteca falhar no envio.
        """
        with self._lock.read():
            instance = self._instances.get(instance_id)
        if instance is None:
            raise NotConnected()
        return instance.send(to, text)

    def disconnect(self, instance_id: str) -> None:
        """Desconecta e remove a instância, emitindo status DISCONNECTED.

        Raises:
            InstanceNotFound: Se o id não está no registry.
        """
        with self._lock.write():
            instance = self._instances.pop(instance_id, None)
        if instance is None:
            raise InstanceNotFound()
        instance.shutdown(silent=False)
        self._sink.release(instance_id)

    def disconnect_all(self) -> int:
        """Desconecta todas as instâncias sem emitir envelopes (shutdown).

        Returns:
            Quantidade de instâncias desconectadas.
        """
        with self._lock.read():
            instances = list(self._instances.values())

        for instance in instances:
            try:
                instance.shutdown(silent=True)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "instance_shutdown_failed",
                    extra={"instance_id": instance.id, "error_type": type(exc).__name__},
                )

        logger.info("registry_disconnected_all", extra={"instance_count": len(instances)})
        return len(instances)
