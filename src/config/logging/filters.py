"""Filter que injeta contexto (service, correlation_id, instance_id) nos records.

O chamador não precisa repetir esses campos em cada `extra`; valores
passados explicitamente têm precedência.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


def _empty() -> str:
    return ""


class LogContextFilter(logging.Filter):
    """Enriquece cada LogRecord com campos de contexto.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Retorna o correlation_id atual.
        instance_id_getter: Retorna o instance_id atual.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        instance_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or _empty
        self._get_instance_id = instance_id_getter or _empty

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona os campos ao record; nunca descarta."""
        record.correlation_id = getattr(record, "correlation_id", None) or self._get_correlation_id()
        record.instance_id = getattr(record, "instance_id", None) or self._get_instance_id()
        record.service = self._service_name
        return True
