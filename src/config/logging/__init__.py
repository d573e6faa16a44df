"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="zap_engine")
    logger = get_logger(__name__)

Campos em todo log: asctime, level, logger, message, service,
correlation_id, instance_id.
"""

from config.logging.config import configure_logging, get_logger, log_dropped
from config.logging.filters import LogContextFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "LogContextFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_dropped",
]
