"""
Exports públicos do módulo fsm/manager.

Máquina de estados genérica (sessão e poller).
"""

from fsm.manager.machine import (
    DEFAULT_MAX_HISTORY,
    FSMStateMachine,
    create_lifecycle_fsm,
    create_poller_fsm,
)

__all__ = [
    "DEFAULT_MAX_HISTORY",
    "FSMStateMachine",
    "create_lifecycle_fsm",
    "create_poller_fsm",
]
