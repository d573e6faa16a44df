"""Contexto da aplicação montado pelo supervisor.

Registry, store, allow-list e dispatcher são singletons do processo,
mas vivem num EngineContext passado por referência para a API em vez
de globais mutáveis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from app.infra.stores import SqliteCredentialStore
from app.infra.webhook import WebhookDispatcher
from app.services import SenderFilter, TerminalQrPrinter
from app.sessions import InstanceRegistry
from config.settings import (
    EngineSettings,
    WebhookSettings,
    WhatsAppSettings,
    get_engine_settings,
    get_webhook_settings,
    get_whatsapp_settings,
)
from utils.errors import EngineError

if TYPE_CHECKING:
    from app.protocols import CredentialStoreProtocol, MessagingClientFactoryProtocol

logger = logging.getLogger(__name__)


@dataclass
class EngineContext:
    """Dependências compartilhadas do processo."""

    engine: EngineSettings
    webhook: WebhookSettings
    whatsapp: WhatsAppSettings
    store: CredentialStoreProtocol
    sender_filter: SenderFilter
    dispatcher: WebhookDispatcher
    registry: InstanceRegistry
    restored: list[str] = field(default_factory=list)


def build_context(
    *,
    engine: EngineSettings | None = None,
    webhook: WebhookSettings | None = None,
    whatsapp: WhatsAppSettings | None = None,
    store: CredentialStoreProtocol | None = None,
    factory: MessagingClientFactoryProtocol | None = None,
    dispatcher: WebhookDispatcher | None = None,
) -> EngineContext:
    """Monta o contexto a partir das settings (overrides para testes).

    Raises:
        OpenError: Se o store de credenciais não abrir.
    """
    engine = engine or get_engine_settings()
    webhook = webhook or get_webhook_settings()
    whatsapp = whatsapp or get_whatsapp_settings()

    if store is None:
        store = SqliteCredentialStore.open(engine.store_path)

    if factory is None:
        from app.bootstrap.whatsapp_factory import create_messaging_factory

        factory = create_messaging_factory(store.path, whatsapp.client_log_level)

    if dispatcher is None:
        dispatcher = WebhookDispatcher(
            webhook.url,
            timeout_seconds=webhook.timeout_seconds,
            queue_size=webhook.queue_size,
        )

    sender_filter = SenderFilter(whatsapp.allowed_senders)
    registry = InstanceRegistry(
        store,
        factory,
        dispatcher,
        sender_filter,
        qr_printer=TerminalQrPrinter() if engine.qr_terminal else None,
    )

    logger.info(
        "engine_context_built",
        extra={
            "store_path": store.path,
            "webhook_url": webhook.url,
            "allowed_sender_count": len(sender_filter),
            "auto_restore": engine.auto_restore,
        },
    )
    return EngineContext(
        engine=engine,
        webhook=webhook,
        whatsapp=whatsapp,
        store=store,
        sender_filter=sender_filter,
        dispatcher=dispatcher,
        registry=registry,
    )


def log_restorable_devices(store: CredentialStoreProtocol) -> list[str]:
    """Loga os devices persistidos e retorna seus user ids.

    Falha do store aqui é só diagnóstico: loga e segue.
    """
    try:
        devices = store.list_devices()
    except EngineError as exc:
        logger.warning("device_listing_failed", extra={"error_type": type(exc).__name__})
        return []

    users: list[str] = []
    for device in devices:
        user = device.user
        if not user or user in users:
            continue
        users.append(user)
        logger.info("restorable_device_found", extra={"instance_id": user})

    logger.info("restorable_devices_listed", extra={"device_count": len(users)})
    return users


def auto_restore(context: EngineContext) -> list[str]:
    """Chama connect para cada device persistido (AUTO_RESTORE=true).

    Returns:
        Ids cujo connect foi aceito.
    """
    restored: list[str] = []
    for instance_id in log_restorable_devices(context.store):
        try:
            context.registry.connect(instance_id)
        except EngineError as exc:
            logger.warning(
                "instance_restore_failed",
                extra={"instance_id": instance_id, "error": exc.code},
            )
            continue
        restored.append(instance_id)

    context.restored = restored
    logger.info("instances_restored", extra={"instance_count": len(restored)})
    return restored
