"""
Regras de transição válidas entre estados da FSM.

Dois grafos independentes:
    - LIFECYCLE_TRANSITIONS: sessão do tenant (controlador)
    - POLLER_TRANSITIONS: uma execução de polling
"""

from fsm.states.lifecycle import (
    POLLER_TERMINAL_STATES,
    LifecycleState,
    MachineState,
    PollerState,
)

# Chave: estado de origem / Valor: estados de destino permitidos
TransitionMap = dict[MachineState, frozenset[MachineState]]

LIFECYCLE_TRANSITIONS: TransitionMap = {
    # IDLE: inicia pareamento ou descobre sessão já autenticada (confirm)
    LifecycleState.IDLE: frozenset({
        LifecycleState.INITIALIZING,
        LifecycleState.AUTHENTICATED,
    }),

    # INITIALIZING: QR disponível, já autenticado, ou falha/expiração
    LifecycleState.INITIALIZING: frozenset({
        LifecycleState.AWAITING_SCAN,
        LifecycleState.AUTHENTICATED,
        LifecycleState.IDLE,
    }),

    # AWAITING_SCAN: leitura concluída, novo desafio (regenerate), ou expiração/falha
    LifecycleState.AWAITING_SCAN: frozenset({
        LifecycleState.INITIALIZING,
        LifecycleState.AUTHENTICATED,
        LifecycleState.IDLE,
    }),

    # AUTHENTICATED: só sai via disconnect ou logout externo
    LifecycleState.AUTHENTICATED: frozenset({
        LifecycleState.IDLE,
    }),
}

POLLER_TRANSITIONS: TransitionMap = {
    PollerState.IDLE: frozenset({
        PollerState.RUNNING,
        PollerState.CANCELLED,
    }),
    PollerState.RUNNING: frozenset({
        PollerState.SUCCEEDED,
        PollerState.EXPIRED,
        PollerState.CANCELLED,
        PollerState.FAILED,
    }),

    # Estados terminais: sem saída
    PollerState.SUCCEEDED: frozenset(),
    PollerState.EXPIRED: frozenset(),
    PollerState.CANCELLED: frozenset(),
    PollerState.FAILED: frozenset(),
}


def transitions_for(state: MachineState) -> TransitionMap:
    """Retorna o grafo ao qual o estado pertence."""
    if isinstance(state, PollerState):
        return POLLER_TRANSITIONS
    return LIFECYCLE_TRANSITIONS


def get_valid_targets(state: MachineState) -> frozenset[MachineState]:
    """
    Retorna os estados de destino válidos para um estado de origem.

    Args:
        state: Estado de origem

    Returns:
        Conjunto de estados de destino permitidos (vazio se terminal)
    """
    return transitions_for(state).get(state, frozenset())


def is_transition_valid(from_state: MachineState, to_state: MachineState) -> bool:
    """
    Verifica se uma transição é válida segundo as regras definidas.

    Transições entre grafos diferentes (lifecycle → poller) nunca são válidas.
    """
    if type(from_state) is not type(to_state):
        return False

    if from_state in POLLER_TERMINAL_STATES:
        return False

    return to_state in get_valid_targets(from_state)


def validate_transition_map(
    transitions: TransitionMap,
    states: type[LifecycleState] | type[PollerState],
) -> list[str]:
    """
    Valida a integridade de um mapa de transições.

    Verifica:
    - Todos os estados do enum estão no mapa
    - Estados terminais têm conjunto vazio
    - Nenhuma transição aponta para estado de outro grafo

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in states:
        if state not in transitions:
            errors.append(f"Estado {state.name} ausente no mapa de transições")

    for state, targets in transitions.items():
        if state in POLLER_TERMINAL_STATES and targets:
            errors.append(
                f"Estado terminal {state.name} não deveria ter transições: {targets}"
            )
        for target in targets:
            if not isinstance(target, states):
                errors.append(f"Transição {state.name} → {target}: destino inválido")

    return errors
