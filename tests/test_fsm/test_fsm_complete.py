"""
Testes do módulo FSM: estados, mapas de transição, guards e máquina.

Um teste cobre componentes relacionados; foco em cenários válidos,
inválidos e bordas.
"""

import pytest

from fsm import (
    DEFAULT_INITIAL_STATE,
    DEFAULT_POLLER_STATE,
    LIFECYCLE_TRANSITIONS,
    PAIRING_STATES,
    POLLER_TERMINAL_STATES,
    POLLER_TRANSITIONS,
    FSMStateMachine,
    GuardResult,
    LifecycleState,
    PollerState,
    StateTransition,
    TransitionResult,
    create_lifecycle_fsm,
    create_poller_fsm,
    evaluate_guards,
    get_valid_targets,
    is_pairing,
    is_terminal,
    is_transition_valid,
    is_valid_state,
    validate_transition_map,
)
from fsm.rules.guards import guard_same_state, guard_terminal_state, guard_valid_state


class TestStates:
    """LifecycleState, PollerState e predicados."""

    def test_states_and_predicates(self) -> None:
        assert DEFAULT_INITIAL_STATE == LifecycleState.IDLE
        assert DEFAULT_POLLER_STATE == PollerState.IDLE
        assert PAIRING_STATES == {LifecycleState.INITIALIZING, LifecycleState.AWAITING_SCAN}
        assert POLLER_TERMINAL_STATES == {
            PollerState.SUCCEEDED,
            PollerState.EXPIRED,
            PollerState.CANCELLED,
            PollerState.FAILED,
        }
        assert is_pairing(LifecycleState.AWAITING_SCAN) is True
        assert is_pairing(LifecycleState.AUTHENTICATED) is False
        assert is_terminal(PollerState.CANCELLED) is True
        assert is_terminal(LifecycleState.IDLE) is False
        assert is_valid_state(PollerState.RUNNING) is True
        assert is_valid_state("IDLE") is False
        assert str(LifecycleState.AWAITING_SCAN) == "AWAITING_SCAN"


class TestTransitionMaps:
    """Integridade dos mapas e consultas de validade."""

    def test_maps_are_consistent(self) -> None:
        assert validate_transition_map(LIFECYCLE_TRANSITIONS, LifecycleState) == []
        assert validate_transition_map(POLLER_TRANSITIONS, PollerState) == []

    def test_validate_detects_missing_state_and_foreign_target(self) -> None:
        broken = {
            LifecycleState.IDLE: frozenset({PollerState.RUNNING}),
        }

        errors = validate_transition_map(broken, LifecycleState)

        assert any("ausente" in e for e in errors)
        assert any("destino inválido" in e for e in errors)

    @pytest.mark.parametrize(
        ("source", "target", "expected"),
        [
            (LifecycleState.IDLE, LifecycleState.INITIALIZING, True),
            (LifecycleState.IDLE, LifecycleState.AUTHENTICATED, True),
            (LifecycleState.IDLE, LifecycleState.AWAITING_SCAN, False),
            (LifecycleState.AWAITING_SCAN, LifecycleState.INITIALIZING, True),
            (LifecycleState.AUTHENTICATED, LifecycleState.AWAITING_SCAN, False),
            (LifecycleState.AUTHENTICATED, LifecycleState.IDLE, True),
            (PollerState.RUNNING, PollerState.EXPIRED, True),
            (PollerState.SUCCEEDED, PollerState.RUNNING, False),
            (LifecycleState.IDLE, PollerState.RUNNING, False),
        ],
    )
    def test_is_transition_valid(self, source, target, expected: bool) -> None:
        assert is_transition_valid(source, target) is expected

    def test_idle_and_authenticated_reachable_from_every_other_state(self) -> None:
        for state in LifecycleState:
            targets = get_valid_targets(state)
            if state != LifecycleState.IDLE:
                assert LifecycleState.IDLE in targets
            if state not in (LifecycleState.AUTHENTICATED,):
                assert LifecycleState.AUTHENTICATED in targets


class TestGuards:
    def test_individual_guards(self) -> None:
        assert guard_valid_state(LifecycleState.IDLE, PollerState.RUNNING).allowed is False
        assert guard_terminal_state(PollerState.FAILED, PollerState.RUNNING).allowed is False
        assert guard_same_state(LifecycleState.IDLE, LifecycleState.IDLE).allowed is False
        assert guard_same_state(LifecycleState.IDLE, LifecycleState.INITIALIZING).allowed is True

    def test_evaluate_guards_returns_first_denial(self) -> None:
        result = evaluate_guards(PollerState.EXPIRED, PollerState.EXPIRED)

        assert isinstance(result, GuardResult)
        assert result.allowed is False
        assert "terminal" in (result.reason or "")

    def test_custom_guard_list(self) -> None:
        deny_all = lambda _from, _to: GuardResult.deny("bloqueado")  # noqa: E731

        result = evaluate_guards(LifecycleState.IDLE, LifecycleState.INITIALIZING, [deny_all])

        assert result.reason == "bloqueado"


class TestStateMachine:
    def test_lifecycle_happy_path_records_history(self) -> None:
        machine = create_lifecycle_fsm("tenant-1")

        for target, trigger in [
            (LifecycleState.INITIALIZING, "connect"),
            (LifecycleState.AWAITING_SCAN, "qr_received"),
            (LifecycleState.AUTHENTICATED, "poll_succeeded"),
        ]:
            result = machine.transition(target, trigger)
            assert isinstance(result, TransitionResult)
            assert result.success is True

        assert machine.current_state == LifecycleState.AUTHENTICATED
        assert [t.trigger for t in machine.history] == ["connect", "qr_received", "poll_succeeded"]
        summary = machine.get_state_summary()
        assert summary["machine_id"] == "tenant-1"
        assert summary["valid_targets"] == ["IDLE"]

    def test_invalid_and_reflexive_transitions_rejected(self) -> None:
        machine = create_lifecycle_fsm("tenant-1")

        skip = machine.transition(LifecycleState.AWAITING_SCAN, "qr_received")
        same = machine.transition(LifecycleState.IDLE, "noop")

        assert skip.success is False
        assert "inválida" in (skip.error_reason or "")
        assert same.success is False
        assert machine.current_state == LifecycleState.IDLE
        assert machine.history == []

    def test_poller_terminal_state_is_final(self) -> None:
        machine = create_poller_fsm("tenant-1")
        machine.transition(PollerState.RUNNING, "start")
        machine.transition(PollerState.CANCELLED, "cancel")

        assert machine.is_terminal is True
        assert machine.can_transition_to(PollerState.RUNNING) is False
        assert machine.transition(PollerState.SUCCEEDED, "poll").success is False

    def test_history_is_bounded(self) -> None:
        machine = FSMStateMachine(initial_state=LifecycleState.IDLE, max_history=2)
        machine.transition(LifecycleState.INITIALIZING, "connect")
        machine.transition(LifecycleState.IDLE, "failed")
        machine.transition(LifecycleState.AUTHENTICATED, "confirm")

        assert len(machine.history) == 2
        assert machine.get_history_summary()[-1]["trigger"] == "confirm"


class TestTypes:
    def test_state_transition_requires_trigger(self) -> None:
        with pytest.raises(ValueError):
            StateTransition(
                from_state=LifecycleState.IDLE,
                to_state=LifecycleState.INITIALIZING,
                trigger="",
            )

    def test_transition_result_consistency(self) -> None:
        with pytest.raises(ValueError):
            TransitionResult(success=True)
        with pytest.raises(ValueError):
            TransitionResult(success=False)
