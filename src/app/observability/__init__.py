"""Observabilidade — contexto de correlação para logs estruturados.

Uso:
    from app.observability import get_correlation_id, instance_scope
"""

from app.observability.correlation import (
    generate_correlation_id,
    get_correlation_id,
    get_instance_id,
    instance_scope,
    reset_correlation_id,
    set_correlation_id,
)

__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "get_instance_id",
    "instance_scope",
    "reset_correlation_id",
    "set_correlation_id",
]
