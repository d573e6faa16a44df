"""Agregador de settings do engine.

Re-exporta as settings de cada domínio.
"""

from __future__ import annotations

from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
    parse_bool,
    parse_csv,
)
from config.settings.engine import EngineSettings, get_engine_settings
from config.settings.webhook import WebhookSettings, get_webhook_settings
from config.settings.whatsapp import (
    DEFAULT_USER_SERVER,
    WhatsAppSettings,
    get_whatsapp_settings,
)

__all__ = [
    "DEFAULT_USER_SERVER",
    "BaseSettings",
    "EngineSettings",
    "Environment",
    "WebhookSettings",
    "WhatsAppSettings",
    "get_base_settings",
    "get_engine_settings",
    "get_webhook_settings",
    "get_whatsapp_settings",
    "parse_bool",
    "parse_csv",
]
