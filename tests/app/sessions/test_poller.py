"""Testes do SessionPoller: cadência, checkpoint, orçamento e cancelamento."""

from __future__ import annotations

import asyncio

import pytest

from app.sessions.models import PollOutcome, StatusSnapshot
from app.sessions.poller import SessionPoller
from config.settings import PairingSettings
from fsm import PollerState
from tests.fakes.fake_session_backend import (
    FakeClock,
    FakeSessionBackend,
    authenticated,
    authenticating,
    disconnected,
    manager_ctx,
)
from utils.errors import UnauthorizedError, UnexpectedError, UnreachableError


class _Recorder:
    def __init__(self) -> None:
        self.statuses: list[StatusSnapshot] = []
        self.outcomes: list[PollOutcome] = []

    def on_status(self, snapshot: StatusSnapshot) -> None:
        self.statuses.append(snapshot)

    def on_terminal(self, outcome: PollOutcome) -> None:
        self.outcomes.append(outcome)


def _poller(
    backend: FakeSessionBackend,
    clock: FakeClock,
    settings: PairingSettings | None = None,
) -> SessionPoller:
    return SessionPoller(backend, settings or PairingSettings(), clock=clock, sleep=clock.sleep)


async def _run(poller: SessionPoller, recorder: _Recorder) -> PollOutcome:
    poller.start(manager_ctx(), recorder.on_status, recorder.on_terminal)
    await poller.wait()
    assert len(recorder.outcomes) == 1
    return recorder.outcomes[0]


@pytest.mark.asyncio
async def test_authenticated_status_succeeds_with_connection_info() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(authenticating(), authenticating(), authenticated(phone="5511999990000"))
    clock = FakeClock()
    recorder = _Recorder()

    outcome = await _run(_poller(backend, clock), recorder)

    assert outcome.state == PollerState.SUCCEEDED
    assert outcome.info is not None
    assert outcome.info.phone_number == "5511999990000"
    assert outcome.attempts == 3
    assert clock.sleeps == [3.0, 3.0, 3.0]
    assert len(recorder.statuses) == 2


@pytest.mark.asyncio
async def test_soft_checkpoint_resets_attempts_while_authenticating() -> None:
    backend = FakeSessionBackend()
    # 20 consultas regulares + 1 consulta do checkpoint + 3 regulares + autenticado
    backend.queue_status(*[authenticating()] * 24, authenticated())
    clock = FakeClock()
    recorder = _Recorder()
    poller = _poller(backend, clock)

    outcome = await _run(poller, recorder)

    assert outcome.state == PollerState.SUCCEEDED
    assert backend.count("check_status") == 25
    assert outcome.attempts == 4
    assert clock.now - 1000.0 < 180.0


@pytest.mark.asyncio
async def test_soft_checkpoint_expires_when_backend_no_longer_authenticating() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(*[authenticating()] * 20, disconnected())
    recorder = _Recorder()

    outcome = await _run(_poller(backend, FakeClock()), recorder)

    assert outcome.state == PollerState.EXPIRED
    assert outcome.error is None


@pytest.mark.asyncio
async def test_soft_checkpoint_can_succeed() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(*[authenticating()] * 20, authenticated())
    recorder = _Recorder()

    outcome = await _run(_poller(backend, FakeClock()), recorder)

    assert outcome.state == PollerState.SUCCEEDED


@pytest.mark.asyncio
async def test_hard_budget_expires_and_wins_over_checkpoint() -> None:
    backend = FakeSessionBackend()
    clock = FakeClock()
    recorder = _Recorder()

    outcome = await _run(_poller(backend, clock), recorder)

    assert outcome.state == PollerState.EXPIRED
    assert clock.now - 1000.0 == pytest.approx(180.0)
    # 59 consultas regulares + 2 checkpoints; a 60ª espera esgota o orçamento
    assert backend.count("check_status") == 61


@pytest.mark.asyncio
async def test_unreachable_failures_reset_on_success() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(
        UnreachableError("down"),
        UnreachableError("down"),
        authenticating(),
        UnreachableError("down"),
        UnreachableError("down"),
        authenticated(),
    )
    recorder = _Recorder()

    outcome = await _run(_poller(backend, FakeClock()), recorder)

    assert outcome.state == PollerState.SUCCEEDED


@pytest.mark.asyncio
async def test_three_consecutive_unreachable_errors_fail() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(*[UnreachableError("down")] * 3)
    recorder = _Recorder()

    outcome = await _run(_poller(backend, FakeClock()), recorder)

    assert outcome.state == PollerState.FAILED
    assert isinstance(outcome.error, UnreachableError)
    assert backend.count("check_status") == 3


@pytest.mark.asyncio
async def test_request_timeout_counts_as_unreachable() -> None:
    backend = FakeSessionBackend()
    backend.status_gate = asyncio.Event()
    settings = PairingSettings(request_timeout_seconds=0.01, max_consecutive_failures=2)
    recorder = _Recorder()

    outcome = await _run(_poller(backend, FakeClock(), settings), recorder)

    assert outcome.state == PollerState.FAILED
    assert isinstance(outcome.error, UnreachableError)


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [UnauthorizedError("nope"), UnexpectedError("bad payload")])
async def test_non_transient_errors_fail_immediately(error: Exception) -> None:
    backend = FakeSessionBackend()
    backend.queue_status(error)
    recorder = _Recorder()

    outcome = await _run(_poller(backend, FakeClock()), recorder)

    assert outcome.state == PollerState.FAILED
    assert outcome.error is error
    assert backend.count("check_status") == 1


@pytest.mark.asyncio
async def test_cancel_during_inflight_request_suppresses_callbacks() -> None:
    backend = FakeSessionBackend()
    backend.status_gate = asyncio.Event()
    backend.default_status = authenticated()
    recorder = _Recorder()
    poller = _poller(backend, FakeClock())

    poller.start(manager_ctx(), recorder.on_status, recorder.on_terminal)
    while backend.count("check_status") == 0:
        await asyncio.sleep(0)

    poller.cancel()
    backend.status_gate.set()
    await poller.wait()

    assert poller.state == PollerState.CANCELLED
    assert recorder.outcomes == []
    assert recorder.statuses == []


@pytest.mark.asyncio
async def test_cancel_from_status_callback_suppresses_terminal_callback() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(authenticating(), authenticated())
    outcomes: list[PollOutcome] = []
    poller = _poller(backend, FakeClock())

    poller.start(manager_ctx(), lambda _: poller.cancel(), outcomes.append)
    await poller.wait()

    assert outcomes == []
    assert poller.state == PollerState.CANCELLED


@pytest.mark.asyncio
async def test_cancel_is_idempotent_and_safe_before_start() -> None:
    poller = _poller(FakeSessionBackend(), FakeClock())

    poller.cancel()
    poller.cancel()

    assert poller.state == PollerState.CANCELLED
    with pytest.raises(RuntimeError):
        poller.start(manager_ctx(), lambda _: None, lambda _: None)


@pytest.mark.asyncio
async def test_cancel_after_terminal_keeps_outcome() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(authenticated())
    recorder = _Recorder()
    poller = _poller(backend, FakeClock())

    await _run(poller, recorder)
    poller.cancel()

    assert poller.state == PollerState.SUCCEEDED


@pytest.mark.asyncio
async def test_status_callback_errors_do_not_stop_polling() -> None:
    backend = FakeSessionBackend()
    backend.queue_status(authenticating(qr="qr-2"), authenticated())
    outcomes: list[PollOutcome] = []

    def _broken(_: StatusSnapshot) -> None:
        raise RuntimeError("listener bug")

    poller = _poller(backend, FakeClock())
    poller.start(manager_ctx(), _broken, outcomes.append)
    await poller.wait()

    assert [o.state for o in outcomes] == [PollerState.SUCCEEDED]
