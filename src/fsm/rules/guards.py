"""
Guards e invariantes para transições de estado.

Guards podem bloquear uma transição que o grafo permitiria,
devolvendo o motivo para auditoria.
"""

from collections.abc import Callable

from fsm.states.lifecycle import POLLER_TERMINAL_STATES, MachineState, is_valid_state


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[MachineState, MachineState], GuardResult]


def guard_valid_state(
    from_state: MachineState,
    to_state: MachineState,
) -> GuardResult:
    """Guard: ambos os estados existem e pertencem ao mesmo grafo."""
    if not is_valid_state(from_state):
        return GuardResult.deny(f"Estado de origem inválido: {from_state}")

    if not is_valid_state(to_state):
        return GuardResult.deny(f"Estado de destino inválido: {to_state}")

    if type(from_state) is not type(to_state):
        return GuardResult.deny(
            f"Estados de grafos diferentes: {from_state.name} → {to_state.name}"
        )

    return GuardResult.allow()


def guard_terminal_state(
    from_state: MachineState,
    to_state: MachineState,
) -> GuardResult:
    """Guard: execução de polling encerrada não muda mais de estado."""
    if from_state in POLLER_TERMINAL_STATES:
        return GuardResult.deny(
            f"Estado {from_state.name} é terminal, não permite transição"
        )
    return GuardResult.allow()


def guard_same_state(
    from_state: MachineState,
    to_state: MachineState,
) -> GuardResult:
    """Guard: transição reflexiva não é permitida em nenhum dos grafos."""
    if from_state == to_state:
        return GuardResult.deny(
            f"Transição reflexiva não permitida: {from_state.name} → {to_state.name}"
        )
    return GuardResult.allow()


# Aplicados em ordem; todos devem permitir
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_state,
    guard_terminal_state,
    guard_same_state,
]


def evaluate_guards(
    from_state: MachineState,
    to_state: MachineState,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_state, to_state)
        if not result.allowed:
            return result

    return GuardResult.allow()
