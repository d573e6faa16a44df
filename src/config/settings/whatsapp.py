"""Settings específicas do canal WhatsApp (biblioteca multi-device)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from config.settings.base.core import parse_csv

# Remetentes liberados em dev/teste para evitar spam
DEFAULT_ALLOWED_SENDER = "556199836903,5561992178060"

DEFAULT_USER_SERVER = "s.whatsapp.net"


@dataclass(frozen=True)
class WhatsAppSettings:
    """Configurações do canal WhatsApp.

    Attributes:
        allowed_senders: User ids cujas mensagens são encaminhadas
        client_log_level: Nível de log repassado ao cliente da biblioteca
    """

    allowed_senders: tuple[str, ...] = parse_csv(DEFAULT_ALLOWED_SENDER)
    client_log_level: str = "INFO"

    def validate(self) -> list[str]:
        """Valida configurações mínimas de WhatsApp."""
        errors: list[str] = []

        if not self.allowed_senders:
            errors.append("ALLOWED_SENDER vazio: nenhuma mensagem será encaminhada")

        if self.client_log_level not in ("DEBUG", "INFO", "WARN", "WARNING", "ERROR"):
            errors.append(f"CLIENT_LOG_LEVEL inválido: {self.client_log_level}")

        return errors


def _load_whatsapp_from_env() -> WhatsAppSettings:
    """Carrega WhatsAppSettings de variáveis de ambiente."""
    return WhatsAppSettings(
        allowed_senders=parse_csv(os.getenv("ALLOWED_SENDER", DEFAULT_ALLOWED_SENDER)),
        client_log_level=os.getenv("CLIENT_LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_whatsapp_settings() -> WhatsAppSettings:
    """Retorna instância cacheada de WhatsAppSettings."""
    return _load_whatsapp_from_env()
