"""
Exports públicos do módulo fsm/states.

Estados do ciclo de vida da sessão e das execuções de polling.
"""

from fsm.states.lifecycle import (
    DEFAULT_INITIAL_STATE,
    DEFAULT_POLLER_STATE,
    PAIRING_STATES,
    POLLER_TERMINAL_STATES,
    LifecycleState,
    MachineState,
    PollerState,
    is_pairing,
    is_terminal,
    is_valid_state,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "DEFAULT_POLLER_STATE",
    "PAIRING_STATES",
    "POLLER_TERMINAL_STATES",
    "LifecycleState",
    "MachineState",
    "PollerState",
    "is_pairing",
    "is_terminal",
    "is_valid_state",
]
