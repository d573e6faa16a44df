"""Configuração do pytest para o zap-multi-engine."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ ao PYTHONPATH para permitir imports absolutos
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings são cacheadas por lru_cache; cada teste lê o ambiente do zero."""
    from config.settings import (
        get_base_settings,
        get_engine_settings,
        get_webhook_settings,
        get_whatsapp_settings,
    )

    caches = (get_base_settings, get_engine_settings, get_webhook_settings, get_whatsapp_settings)
    for getter in caches:
        getter.cache_clear()
    yield
    for getter in caches:
        getter.cache_clear()
