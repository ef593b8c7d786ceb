"""
Exports públicos do módulo fsm/transitions.

Regras de transição válidas entre estados da FSM.
"""

from fsm.transitions.rules import (
    LIFECYCLE_TRANSITIONS,
    POLLER_TRANSITIONS,
    TransitionMap,
    get_valid_targets,
    is_transition_valid,
    transitions_for,
    validate_transition_map,
)

__all__ = [
    "LIFECYCLE_TRANSITIONS",
    "POLLER_TRANSITIONS",
    "TransitionMap",
    "get_valid_targets",
    "is_transition_valid",
    "transitions_for",
    "validate_transition_map",
]
