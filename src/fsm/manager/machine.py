"""
Máquina de estados (FSMStateMachine) genérica.

Controla transições do ciclo de vida da sessão e das execuções de polling,
mantendo histórico rastreável para auditoria.
"""

from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.lifecycle import (
    DEFAULT_INITIAL_STATE,
    DEFAULT_POLLER_STATE,
    MachineState,
    is_terminal,
)
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult

DEFAULT_MAX_HISTORY = 50


class FSMStateMachine:
    """
    Máquina de estados para sessão (LifecycleState) ou poller (PollerState).

    O grafo é escolhido pelo tipo do estado inicial.

    Attributes:
        current_state: Estado atual da máquina
        history: Histórico de transições realizadas (limitado)
    """

    __slots__ = ("_current_state", "_history", "_machine_id", "_max_history")

    def __init__(
        self,
        initial_state: MachineState | None = None,
        machine_id: str = "",
        max_history: int = DEFAULT_MAX_HISTORY,
    ) -> None:
        """
        Inicializa a máquina de estados.

        Args:
            initial_state: Estado inicial (usa DEFAULT_INITIAL_STATE se None)
            machine_id: Identificador para logs (ex: tenant_id)
            max_history: Máximo de transições mantidas em memória
        """
        self._current_state: MachineState = initial_state or DEFAULT_INITIAL_STATE
        self._history: list[StateTransition] = []
        self._machine_id = machine_id
        self._max_history = max_history

    @property
    def current_state(self) -> MachineState:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def machine_id(self) -> str:
        return self._machine_id

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._current_state)

    def can_transition_to(self, target: MachineState) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        if not is_transition_valid(self._current_state, target):
            return False
        return evaluate_guards(self._current_state, target).allowed

    def get_valid_targets(self) -> frozenset[MachineState]:
        """Retorna estados de destino válidos a partir do estado atual."""
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: MachineState,
        trigger: str,
        reason: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho (ex: 'connect', 'cancel')
            reason: Motivo tipado associado à transição
            metadata: Dados adicionais para auditoria (nunca credenciais)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        guard_result: GuardResult = evaluate_guards(self._current_state, target)
        if not guard_result.allowed:
            return TransitionResult(success=False, error_reason=guard_result.reason)

        if not is_transition_valid(self._current_state, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current_state.name} → {target.name}"
                ),
            )

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            reason=reason,
            metadata=metadata or {},
        )

        self._current_state = target
        self._history.append(transition)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual para observability (seguro para logs)."""
        return {
            "machine_id": self._machine_id,
            "current_state": self._current_state.name,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.name for s in self.get_valid_targets()),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]


def create_lifecycle_fsm(tenant_id: str) -> FSMStateMachine:
    """Cria FSM do ciclo de vida da sessão de um tenant (inicia em IDLE)."""
    return FSMStateMachine(initial_state=DEFAULT_INITIAL_STATE, machine_id=tenant_id)


def create_poller_fsm(tenant_id: str) -> FSMStateMachine:
    """Cria FSM de uma execução de polling (inicia em IDLE)."""
    return FSMStateMachine(initial_state=DEFAULT_POLLER_STATE, machine_id=tenant_id)
