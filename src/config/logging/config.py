"""Configuração centralizada de logging.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="zap_engine")

    logger = get_logger(__name__)
    logger.info("instance_connected", extra={"instance_id": "5561999990000"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import LogContextFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "zap_engine"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    instance_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado no root logger.

    Deve ser chamada uma vez na inicialização (app/bootstrap/).

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
        instance_id_getter: Função que retorna o instance_id atual.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(
        LogContextFilter(service_name, correlation_id_getter, instance_id_getter)
    )

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]

    # uvicorn instala handlers próprios; propagamos para o root JSON
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo (o filter injeta o contexto)."""
    return logging.getLogger(name)


def log_dropped(
    logger: logging.Logger,
    component: str,
    reason: str,
    instance_id: str | None = None,
    event: str | None = None,
) -> None:
    """Log observável de evento descartado (best-effort, sem PII).

    Args:
        logger: Logger instance.
        component: Quem descartou (ex: "webhook_dispatcher").
        reason: Motivo curto (ex: "queue_full", "sealed").
        instance_id: Instância dona do evento, quando conhecida.
        event: Tipo do envelope descartado (qr|status|message).
    """
    extra: dict[str, object] = {
        "dropped": True,
        "component": component,
        "reason": reason,
    }
    if instance_id:
        extra["instance_id"] = instance_id
    if event:
        extra["event"] = event

    logger.warning("Event dropped by %s", component, extra=extra)
