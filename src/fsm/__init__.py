"""
Módulo FSM — Máquinas de estado do pareamento WhatsApp.

Estrutura:
    - states/: LifecycleState (sessão do tenant) e PollerState (polling)
    - transitions/: LIFECYCLE_TRANSITIONS e POLLER_TRANSITIONS
    - rules/: Guards e invariantes
    - manager/: Máquina de estados (FSMStateMachine)
    - types/: Tipos de dados (StateTransition, TransitionResult)
"""

# Manager
from fsm.manager import (
    FSMStateMachine,
    create_lifecycle_fsm,
    create_poller_fsm,
)

# Guards/Rules
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)

# Estados
from fsm.states import (
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

# Transições
from fsm.transitions import (
    LIFECYCLE_TRANSITIONS,
    POLLER_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)

# Types
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "DEFAULT_POLLER_STATE",
    "LIFECYCLE_TRANSITIONS",
    "PAIRING_STATES",
    "POLLER_TERMINAL_STATES",
    "POLLER_TRANSITIONS",
    "FSMStateMachine",
    "GuardResult",
    "LifecycleState",
    "MachineState",
    "PollerState",
    "StateTransition",
    "TransitionResult",
    "create_lifecycle_fsm",
    "create_poller_fsm",
    "evaluate_guards",
    "get_valid_targets",
    "is_pairing",
    "is_terminal",
    "is_transition_valid",
    "is_valid_state",
    "validate_transition_map",
]
