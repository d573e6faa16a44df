"""
Exports públicos do módulo fsm/types.
"""

from fsm.types.transition import StatusTransition, TransitionResult

__all__ = [
    "StatusTransition",
    "TransitionResult",
]
