"""Factory de wiring para o cliente WhatsApp (bootstrap)."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.protocols import MessagingClientFactoryProtocol


def create_messaging_factory(
    store_path: str,
    client_log_level: str = "INFO",
) -> MessagingClientFactoryProtocol:
    """Cria a factory de clientes sobre o arquivo do store.

    A implementação concreta (neonize) é importada localmente para
    respeitar boundaries: só o bootstrap conhece o adapter.
    """
    from app.infra.whatsapp.neonize_client import NeonizeClientFactory

    return NeonizeClientFactory(store_path, log_level=client_log_level)
