"""Formatter JSON dos logs do engine.

Campos obrigatórios em todo record:
- asctime, level, logger, message
- service
- correlation_id (requisição HTTP de origem)
- instance_id (instância WhatsApp envolvida)
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "service",
    "correlation_id",
    "instance_id",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "asctime": "2026-10-17 10:30:00,123",
            "level": "INFO",
            "logger": "app.sessions.instance",
            "message": "instance_connected",
            "service": "zap_engine",
            "correlation_id": "",
            "instance_id": "5561999990000"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)
    return JsonFormatter(format_string, rename_fields=FIELD_RENAME_MAP)
