"""Settings do webhook de saída (backend que recebe os envelopes)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_WEBHOOK_URL = "http://localhost:3000/api/webhook/whatsapp"


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações do dispatcher de webhook.

    Attributes:
        url: Destino dos envelopes (POST JSON)
        timeout_seconds: Timeout de cada POST
        queue_size: Limite da fila ordenada por instância
    """

    url: str = DEFAULT_WEBHOOK_URL
    timeout_seconds: float = 10.0
    queue_size: int = 1000

    def validate(self) -> list[str]:
        """Valida configurações do webhook."""
        errors: list[str] = []

        if not self.url.startswith(("http://", "https://")):
            errors.append(f"WEBHOOK_URL deve ser http(s): {self.url!r}")

        if self.timeout_seconds <= 0:
            errors.append("WEBHOOK_TIMEOUT_SECONDS deve ser > 0")

        if self.queue_size < 1:
            errors.append("WEBHOOK_QUEUE_SIZE deve ser >= 1")

        return errors


def _load_webhook_from_env() -> WebhookSettings:
    """Carrega WebhookSettings de variáveis de ambiente."""
    return WebhookSettings(
        url=os.getenv("WEBHOOK_URL", DEFAULT_WEBHOOK_URL),
        timeout_seconds=float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10")),
        queue_size=int(os.getenv("WEBHOOK_QUEUE_SIZE", "1000")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_webhook_from_env()
