"""
Exports públicos do módulo fsm/manager.
"""

from fsm.manager.machine import StatusMachine, create_status_machine

__all__ = [
    "StatusMachine",
    "create_status_machine",
]
