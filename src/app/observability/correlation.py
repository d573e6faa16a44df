"""Contexto de rastreamento propagado para os logs.

Dois ContextVars:
- correlation_id: identifica a requisição HTTP que originou a operação.
- instance_id: identifica a instância WhatsApp dona da operação.

Callbacks da biblioteca chegam em threads próprias, onde os ContextVars
começam vazios; por isso o handler de eventos usa `instance_scope()`.

Uso:
    from app.observability import instance_scope, set_correlation_id

    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        ...
    finally:
        reset_correlation_id(token)

    with instance_scope("5561999990000"):
        logger.info("instance_connected")
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_instance_id: ContextVar[str] = ContextVar("instance_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or str(uuid.uuid4())
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


def get_instance_id() -> str:
    """Retorna o instance_id do contexto atual (ou string vazia)."""
    return _instance_id.get()


@contextmanager
def instance_scope(instance_id: str) -> Iterator[str]:
    """Vincula instance_id ao contexto durante o bloco."""
    token = _instance_id.set(instance_id)
    try:
        yield instance_id
    finally:
        _instance_id.reset(token)
