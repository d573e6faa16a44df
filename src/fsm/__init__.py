"""
Módulo FSM — máquina de status das instâncias WhatsApp.

Estrutura:
    - states/: InstanceStatus e status terminais
    - transitions/: mapa VALID_TRANSITIONS
    - types/: StatusTransition, TransitionResult
    - manager/: StatusMachine
"""

from fsm.manager import StatusMachine, create_status_machine
from fsm.states import (
    DEFAULT_INITIAL_STATUS,
    TERMINAL_STATUSES,
    InstanceStatus,
    is_terminal,
    is_valid_status,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import StatusTransition, TransitionResult

__all__ = [
    "DEFAULT_INITIAL_STATUS",
    "TERMINAL_STATUSES",
    "VALID_TRANSITIONS",
    "InstanceStatus",
    "StatusMachine",
    "StatusTransition",
    "TransitionResult",
    "create_status_machine",
    "get_valid_targets",
    "is_terminal",
    "is_transition_valid",
    "is_valid_status",
    "validate_transition_map",
]
