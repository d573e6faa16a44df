"""
Exports públicos do módulo fsm/states.

Status de conexão de instâncias.
"""

from fsm.states.status import (
    DEFAULT_INITIAL_STATUS,
    TERMINAL_STATUSES,
    InstanceStatus,
    is_terminal,
    is_valid_status,
)

__all__ = [
    "DEFAULT_INITIAL_STATUS",
    "TERMINAL_STATUSES",
    "InstanceStatus",
    "is_terminal",
    "is_valid_status",
]
