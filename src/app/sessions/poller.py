"""Polling de status do pareamento por QR.

Uma instância = uma execução. O estado segue POLLER_TRANSITIONS:
IDLE → RUNNING → {SUCCEEDED, EXPIRED, CANCELLED, FAILED}.

Regras de uma execução:
- check_status a cada poll_interval_seconds, com timeout por requisição
- UnreachableError/timeout: falhas consecutivas até max_consecutive_failures
- UnauthorizedError e erros inesperados: FAILED na hora
- checkpoint suave a cada soft_checkpoint_attempts tentativas
- orçamento rígido hard_timeout_seconds desde o start (prevalece)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from app.observability import record_poll_outcome
from app.sessions.models import PollAttempt, PollOutcome
from config.settings import PairingSettings
from fsm import PollerState, create_poller_fsm
from utils.errors import SessionBridgeError, UnauthorizedError, UnexpectedError, UnreachableError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from app.protocols import SessionBackendProtocol
    from app.sessions.models import ConnectionInfo, StatusSnapshot, TenantContext

    StatusCallback = Callable[[StatusSnapshot], None]
    TerminalCallback = Callable[[PollOutcome], None]

logger = logging.getLogger(__name__)


class SessionPoller:
    """Consulta o backend até a sessão autenticar, expirar, falhar ou ser cancelada."""

    def __init__(
        self,
        backend: SessionBackendProtocol,
        settings: PairingSettings | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._backend = backend
        self._settings = settings or PairingSettings()
        self._clock = clock
        self._sleep = sleep
        self._fsm = create_poller_fsm("")
        self._task: asyncio.Task[None] | None = None
        self._attempt = PollAttempt()
        self._ctx: TenantContext | None = None
        self._on_status: StatusCallback | None = None
        self._on_terminal: TerminalCallback | None = None

    @property
    def state(self) -> PollerState:
        return self._fsm.current_state  # type: ignore[return-value]

    @property
    def attempt(self) -> PollAttempt:
        return self._attempt

    @property
    def is_running(self) -> bool:
        return self.state == PollerState.RUNNING

    def start(
        self,
        ctx: TenantContext,
        on_status: StatusCallback,
        on_terminal: TerminalCallback,
    ) -> asyncio.Task[None]:
        """Inicia a execução em background.

        Raises:
            RuntimeError: Se a instância já foi iniciada ou cancelada.
        """
        result = self._fsm.transition(PollerState.RUNNING, trigger="start")
        if not result.success:
            raise RuntimeError(f"Poller não pode iniciar: {result.error_reason}")

        self._ctx = ctx
        self._on_status = on_status
        self._on_terminal = on_terminal
        self._attempt = PollAttempt(index=0, started_at=self._clock())
        self._task = asyncio.create_task(self._run(ctx), name=f"session-poller-{ctx.tenant_id}")
        logger.info("session_poller_started", extra={"tenant_id": ctx.tenant_id})
        return self._task

    def cancel(self) -> None:
        """Cancela a execução. Síncrono e idempotente.

        Depois do retorno nenhum callback é invocado.
        """
        if self.state not in (PollerState.IDLE, PollerState.RUNNING):
            return
        self._fsm.transition(PollerState.CANCELLED, trigger="cancel")
        self._record(PollerState.CANCELLED)
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Aguarda o fim da task (sem propagar cancelamento da própria task)."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def _run(self, ctx: TenantContext) -> None:
        settings = self._settings
        failures = 0
        while True:
            await self._sleep(settings.poll_interval_seconds)
            if not self.is_running:
                return
            if self._budget_exhausted():
                self._finish(PollerState.EXPIRED)
                return

            self._attempt = self._attempt.advance()
            try:
                snapshot = await self._check(ctx)
            except (UnreachableError, TimeoutError) as exc:
                failures += 1
                logger.warning(
                    "session_poll_unreachable",
                    extra={
                        "tenant_id": ctx.tenant_id,
                        "attempt": self._attempt.index,
                        "consecutive_failures": failures,
                    },
                )
                if failures >= settings.max_consecutive_failures:
                    self._finish(PollerState.FAILED, error=_as_unreachable(exc))
                    return
                continue
            except SessionBridgeError as exc:
                self._finish(PollerState.FAILED, error=exc)
                return

            if not self.is_running:
                return
            failures = 0
            if snapshot.is_authenticated:
                self._finish(PollerState.SUCCEEDED, info=snapshot.connection_info())
                return
            self._emit_status(snapshot)

            if self._attempt.index >= settings.soft_checkpoint_attempts:
                if not await self._checkpoint(ctx):
                    return

    async def _checkpoint(self, ctx: TenantContext) -> bool:
        """Revalida o desafio com o backend. Retorna True se o polling continua."""
        if self._budget_exhausted():
            self._finish(PollerState.EXPIRED)
            return False

        logger.info(
            "session_poll_checkpoint",
            extra={"tenant_id": ctx.tenant_id, "attempt": self._attempt.index},
        )
        try:
            snapshot = await self._check(ctx)
        except UnauthorizedError as exc:
            self._finish(PollerState.FAILED, error=exc)
            return False
        except (SessionBridgeError, TimeoutError):
            self._finish(PollerState.EXPIRED)
            return False

        if not self.is_running:
            return False
        if snapshot.is_authenticated:
            self._finish(PollerState.SUCCEEDED, info=snapshot.connection_info())
            return False
        if snapshot.is_authenticating:
            self._attempt = self._attempt.reset()
            self._emit_status(snapshot)
            return True

        self._finish(PollerState.EXPIRED)
        return False

    async def _check(self, ctx: TenantContext) -> StatusSnapshot:
        try:
            return await asyncio.wait_for(
                self._backend.check_status(ctx),
                timeout=self._settings.request_timeout_seconds,
            )
        except (SessionBridgeError, TimeoutError):
            raise
        except Exception as exc:
            logger.exception("session_poll_unexpected_error", extra={"tenant_id": ctx.tenant_id})
            raise UnexpectedError(str(exc) or type(exc).__name__) from exc

    def _budget_exhausted(self) -> bool:
        elapsed = self._clock() - self._attempt.started_at
        return elapsed >= self._settings.hard_timeout_seconds

    def _emit_status(self, snapshot: StatusSnapshot) -> None:
        if not self.is_running or self._on_status is None:
            return
        try:
            self._on_status(snapshot)
        except Exception:
            logger.exception("session_poll_status_callback_failed")

    def _finish(
        self,
        state: PollerState,
        *,
        info: ConnectionInfo | None = None,
        error: Exception | None = None,
    ) -> None:
        if not self.is_running:
            return
        self._fsm.transition(
            state,
            trigger="poll",
            reason=type(error).__name__ if error else None,
        )
        self._record(state)
        outcome = PollOutcome(state=state, info=info, error=error, attempts=self._attempt.index)
        if self._on_terminal is None:
            return
        try:
            self._on_terminal(outcome)
        except Exception:
            logger.exception("session_poll_terminal_callback_failed")

    def _record(self, state: PollerState) -> None:
        record_poll_outcome(
            self._ctx.tenant_id if self._ctx else "",
            state.value,
            self._attempt.index,
            max(self._clock() - self._attempt.started_at, 0.0),
        )


def _as_unreachable(exc: Exception) -> SessionBridgeError:
    if isinstance(exc, SessionBridgeError):
        return exc
    return UnreachableError("Session status request timed out")
