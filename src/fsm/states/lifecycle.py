"""
Estados canônicos do pareamento WhatsApp.

Define os estados do ciclo de vida da sessão por tenant (controlador)
e os estados de uma execução de polling (poller).
"""

from enum import StrEnum


class LifecycleState(StrEnum):
    """
    Estados do ciclo de vida da sessão WhatsApp de um tenant.

    Fluxo normal:
        IDLE → INITIALIZING → AWAITING_SCAN → AUTHENTICATED

    IDLE e AUTHENTICATED são alcançáveis a partir de qualquer outro estado
    (falha, expiração, disconnect ou confirmação manual).
    """

    IDLE = "IDLE"
    INITIALIZING = "INITIALIZING"
    AWAITING_SCAN = "AWAITING_SCAN"
    AUTHENTICATED = "AUTHENTICATED"

    def __str__(self) -> str:
        return self.value


class PollerState(StrEnum):
    """
    Estados de uma execução de polling.

    IDLE → RUNNING → {SUCCEEDED, EXPIRED, CANCELLED, FAILED}
    """

    IDLE = "IDLE"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    def __str__(self) -> str:
        return self.value


MachineState = LifecycleState | PollerState

# Uma vez terminal, a execução de polling não muda mais de estado
POLLER_TERMINAL_STATES: frozenset[PollerState] = frozenset({
    PollerState.SUCCEEDED,
    PollerState.EXPIRED,
    PollerState.CANCELLED,
    PollerState.FAILED,
})

# Estados em que existe um fluxo de pareamento em andamento
PAIRING_STATES: frozenset[LifecycleState] = frozenset({
    LifecycleState.INITIALIZING,
    LifecycleState.AWAITING_SCAN,
})

DEFAULT_INITIAL_STATE: LifecycleState = LifecycleState.IDLE
DEFAULT_POLLER_STATE: PollerState = PollerState.IDLE


def is_terminal(state: MachineState) -> bool:
    """Verifica se o estado encerra uma execução de polling."""
    return state in POLLER_TERMINAL_STATES


def is_pairing(state: LifecycleState) -> bool:
    """Verifica se há pareamento em andamento (aguardando QR ou leitura)."""
    return state in PAIRING_STATES


def is_valid_state(state: object) -> bool:
    """
    Verifica se o valor é um estado conhecido.

    Args:
        state: Valor a ser verificado

    Returns:
        True se é LifecycleState ou PollerState
    """
    return isinstance(state, (LifecycleState, PollerState))
