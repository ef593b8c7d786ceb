"""Controlador da sessão WhatsApp compartilhada de um tenant.

Dono único de Session, do QRChallengeHolder e do SessionPoller vigente.
Operações públicas devolvem FlowResult; exceções do backend não passam
desta camada.

Política de concorrência: um connect que chega com outro fluxo em
andamento é rejeitado (ALREADY_IN_PROGRESS) sem I/O. regenerate é o
caminho explícito de cancelar e recomeçar.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.constants.session_messages import message_for
from app.sessions.models import (
    ControllerStatus,
    FlowReason,
    FlowResult,
    QRChallenge,
    Session,
    StateChange,
)
from app.sessions.permissions import can_manage
from app.sessions.poller import SessionPoller
from app.sessions.qr_holder import QRChallengeHolder
from config.logging import log_transition
from config.settings import PairingSettings
from fsm import PAIRING_STATES, LifecycleState, PollerState, create_lifecycle_fsm
from utils.errors import (
    SessionBridgeError,
    UnauthorizedError,
    UnexpectedError,
    UnreachableError,
)

if TYPE_CHECKING:
    from app.protocols import SessionBackendProtocol
    from app.sessions.models import ConnectionInfo, PollOutcome, StatusSnapshot, TenantContext

StateListener = Callable[[StateChange], None]

logger = logging.getLogger(__name__)


class SessionController:
    """Orquestra pareamento, confirmação e desconexão de um tenant."""

    def __init__(
        self,
        tenant_id: str,
        backend: SessionBackendProtocol,
        settings: PairingSettings | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._tenant_id = tenant_id
        self._backend = backend
        self._settings = settings or PairingSettings()
        self._clock = clock
        self._sleep = sleep
        self._session = Session(tenant_id=tenant_id)
        self._fsm = create_lifecycle_fsm(tenant_id)
        self._holder = QRChallengeHolder()
        self._poller: SessionPoller | None = None
        self._lock = asyncio.Lock()
        # Geração do fluxo que detém o lock; lock de fluxo abandonado não bloqueia connect
        self._lock_generation = -1
        self._listeners: list[StateListener] = []
        self._last_reason: FlowReason | None = None
        # Incrementado a cada novo fluxo ou cancelamento; fluxos antigos desistem
        self._generation = 0

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    @property
    def state(self) -> LifecycleState:
        return self._fsm.current_state  # type: ignore[return-value]

    # ──────────────────────────────────────────────────────────────
    # API pública
    # ──────────────────────────────────────────────────────────────

    async def connect(self, ctx: TenantContext) -> FlowResult:
        """Inicia o pareamento (initialize → QR → polling)."""
        if not can_manage(ctx, self._settings.manager_roles):
            return self._denied(ctx, "connect")
        if self.state == LifecycleState.AUTHENTICATED:
            return FlowResult(ok=True, state=self.state)
        if self._flow_in_progress():
            return self._reject_connect()

        async with self._lock:
            # Espera por fluxo abandonado pode ter deixado outro fluxo no lugar
            if self.state == LifecycleState.AUTHENTICATED:
                return FlowResult(ok=True, state=self.state)
            if self.state in PAIRING_STATES:
                return self._reject_connect()
            return await self._start_pairing(ctx, trigger="connect")

    async def regenerate(self, ctx: TenantContext) -> FlowResult:
        """Descarta o desafio atual e recomeça o pareamento."""
        if not can_manage(ctx, self._settings.manager_roles):
            return self._denied(ctx, "regenerate")
        if self.state == LifecycleState.AUTHENTICATED:
            return FlowResult(ok=True, state=self.state)

        self._abort_flow()
        self._holder.clear()
        async with self._lock:
            return await self._start_pairing(ctx, trigger="regenerate")

    async def confirm(self, ctx: TenantContext) -> FlowResult:
        """Verificação imediata fora da cadência do polling."""
        try:
            snapshot = await self._backend.check_status(ctx)
        except UnauthorizedError as exc:
            return self._fail(exc, trigger="confirm")
        except SessionBridgeError as exc:
            reason = _reason_for(exc)
            return FlowResult(
                ok=False,
                state=self.state,
                reason=reason,
                message=message_for(reason, str(exc)),
            )

        if snapshot.is_authenticated:
            if self.state != LifecycleState.AUTHENTICATED:
                self._abort_flow()
                self._mark_authenticated(snapshot.connection_info(), ctx, trigger="confirm")
            return FlowResult(ok=True, state=self.state)

        if self.state == LifecycleState.AUTHENTICATED:
            logger.warning("session_logged_out_externally", extra={"tenant_id": self._tenant_id})
            self._session.clear()
            self._holder.clear()
            return self._to_idle(FlowReason.LOGGED_OUT, trigger="confirm")

        if self.state == LifecycleState.AWAITING_SCAN:
            self._supersede_qr(snapshot)
        return FlowResult(ok=False, state=self.state)

    async def disconnect(self, ctx: TenantContext) -> FlowResult:
        """Encerra a sessão no backend e limpa o estado local."""
        if not can_manage(ctx, self._settings.manager_roles):
            return self._denied(ctx, "disconnect")

        self._abort_flow()
        reason: FlowReason | None = None
        try:
            await self._backend.terminate(ctx)
        except UnauthorizedError:
            reason = FlowReason.REAUTH_REQUIRED
        except SessionBridgeError as exc:
            logger.warning(
                "session_terminate_failed",
                extra={"tenant_id": self._tenant_id, "error_type": type(exc).__name__},
            )

        self._session.clear()
        self._holder.clear()
        self._transition(LifecycleState.IDLE, trigger="disconnect", reason=reason)
        self._last_reason = reason
        return self._result(reason is None, reason)

    def status(self) -> ControllerStatus:
        """Leitura pura do estado atual, sem I/O."""
        now = self._clock()
        qr = self._holder.current
        qr_stale = qr is not None and self._holder.is_stale(now, self._settings.qr_soft_stale_seconds)
        if qr is not None and qr.age(now) >= self._settings.qr_hard_expiry_seconds:
            qr = None
        return ControllerStatus(
            tenant_id=self._tenant_id,
            state=self.state,
            session=self._session.snapshot(),
            qr=qr,
            qr_stale=qr_stale,
            last_reason=self._last_reason,
            poller_state=self._poller.state if self._poller else None,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Registra observador de mudanças de estado. Retorna o unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def close(self) -> None:
        """Cancela o polling (UI fechada ou shutdown)."""
        poller = self._poller
        self._abort_flow()
        if self.state in PAIRING_STATES:
            self._holder.clear()
            self._to_idle(FlowReason.CANCELLED, trigger="close")
        if poller is not None:
            await poller.wait()

    async def wait_for_poller(self) -> None:
        """Aguarda a execução de polling vigente terminar."""
        if self._poller is not None:
            await self._poller.wait()

    # ──────────────────────────────────────────────────────────────
    # Fluxo de pareamento
    # ──────────────────────────────────────────────────────────────

    async def _start_pairing(self, ctx: TenantContext, *, trigger: str) -> FlowResult:
        self._abort_flow()
        self._holder.clear()
        generation = self._generation
        self._lock_generation = generation

        try:
            ack = await self._backend.initialize(ctx)
        except SessionBridgeError as exc:
            if generation != self._generation:
                return self._superseded()
            return self._fail(exc, trigger=trigger)

        if generation != self._generation:
            return self._superseded()
        if not ack.accepted:
            logger.warning("session_initialize_rejected", extra={"tenant_id": self._tenant_id})
            return self._to_idle(FlowReason.FAILED, trigger=trigger)

        self._transition(LifecycleState.INITIALIZING, trigger=trigger)
        return await self._fetch_qr(ctx, generation)

    async def _fetch_qr(self, ctx: TenantContext, generation: int) -> FlowResult:
        last_error: SessionBridgeError | None = None
        for attempt in range(self._settings.qr_fetch_attempts):
            if attempt:
                await self._sleep(self._settings.qr_fetch_delay_seconds)
            if generation != self._generation:
                return self._superseded()

            try:
                snapshot = await self._backend.check_status(ctx)
            except UnreachableError as exc:
                last_error = exc
                logger.info(
                    "session_qr_fetch_retry",
                    extra={"tenant_id": self._tenant_id, "attempt": attempt + 1},
                )
                continue
            except SessionBridgeError as exc:
                if generation != self._generation:
                    return self._superseded()
                return self._fail(exc, trigger="qr_fetch")

            if generation != self._generation:
                return self._superseded()
            if snapshot.is_authenticated:
                self._mark_authenticated(snapshot.connection_info(), ctx, trigger="qr_fetch")
                return FlowResult(ok=True, state=self.state)
            if snapshot.qr:
                self._holder.store(QRChallenge(payload=snapshot.qr, issued_at=self._clock()))
                self._transition(LifecycleState.AWAITING_SCAN, trigger="qr_received")
                self._last_reason = None
                self._start_poller(ctx)
                return FlowResult(ok=True, state=self.state)

        if last_error is not None:
            return self._fail(last_error, trigger="qr_fetch")
        return self._to_idle(FlowReason.QR_UNAVAILABLE, trigger="qr_fetch")

    def _start_poller(self, ctx: TenantContext) -> None:
        poller = SessionPoller(
            self._backend,
            self._settings,
            clock=self._clock,
            sleep=self._sleep,
        )
        self._poller = poller
        poller.start(
            ctx,
            on_status=lambda snapshot: self._on_poll_status(poller, snapshot),
            on_terminal=lambda outcome: self._on_poll_terminal(poller, ctx, outcome),
        )

    def _on_poll_status(self, poller: SessionPoller, snapshot: StatusSnapshot) -> None:
        if poller is not self._poller:
            return
        self._supersede_qr(snapshot)

    def _on_poll_terminal(
        self,
        poller: SessionPoller,
        ctx: TenantContext,
        outcome: PollOutcome,
    ) -> None:
        if poller is not self._poller:
            return

        if outcome.state == PollerState.SUCCEEDED and outcome.info is not None:
            self._mark_authenticated(outcome.info, ctx, trigger="poll_succeeded")
            return

        self._holder.clear()
        if outcome.state == PollerState.EXPIRED:
            self._to_idle(FlowReason.EXPIRED, trigger="poll_expired")
            return

        reason = (
            FlowReason.REAUTH_REQUIRED
            if isinstance(outcome.error, UnauthorizedError)
            else FlowReason.FAILED
        )
        self._to_idle(reason, trigger="poll_failed")

    def _supersede_qr(self, snapshot: StatusSnapshot) -> None:
        current = self._holder.current
        if not snapshot.qr or (current is not None and current.payload == snapshot.qr):
            return
        self._holder.store(QRChallenge(payload=snapshot.qr, issued_at=self._clock()))
        logger.info("session_qr_superseded", extra={"tenant_id": self._tenant_id})

    def _mark_authenticated(
        self,
        info: ConnectionInfo,
        ctx: TenantContext,
        *,
        trigger: str,
    ) -> None:
        self._holder.clear()
        self._session.attach(info, ctx.user_name or ctx.user_id, datetime.now(UTC))
        self._last_reason = None
        self._transition(LifecycleState.AUTHENTICATED, trigger=trigger)

    def _flow_in_progress(self) -> bool:
        if self.state in PAIRING_STATES:
            return True
        return self._lock.locked() and self._lock_generation == self._generation

    def _reject_connect(self) -> FlowResult:
        logger.info(
            "session_connect_rejected",
            extra={"tenant_id": self._tenant_id, "state": self.state.value},
        )
        return self._result(False, FlowReason.ALREADY_IN_PROGRESS)

    def _abort_flow(self) -> None:
        """Invalida o fluxo em andamento e cancela o poller vigente."""
        self._generation += 1
        if self._poller is not None:
            self._poller.cancel()

    # ──────────────────────────────────────────────────────────────
    # Estado, resultados e notificação
    # ──────────────────────────────────────────────────────────────

    def _fail(self, exc: SessionBridgeError, *, trigger: str) -> FlowResult:
        reason = _reason_for(exc)
        logger.warning(
            "session_flow_failed",
            extra={
                "tenant_id": self._tenant_id,
                "trigger": trigger,
                "error_type": type(exc).__name__,
                "reason": reason.value,
            },
        )
        self._holder.clear()
        return self._to_idle(reason, trigger=trigger, detail=str(exc))

    def _to_idle(
        self,
        reason: FlowReason,
        *,
        trigger: str,
        detail: str | None = None,
    ) -> FlowResult:
        self._last_reason = reason
        self._transition(LifecycleState.IDLE, trigger=trigger, reason=reason)
        return self._result(False, reason, detail)

    def _superseded(self) -> FlowResult:
        if self.state == LifecycleState.AUTHENTICATED:
            return FlowResult(ok=True, state=self.state)
        return self._result(False, FlowReason.CANCELLED)

    def _denied(self, ctx: TenantContext, operation: str) -> FlowResult:
        logger.info(
            "session_permission_denied",
            extra={**ctx.to_log_dict(), "operation": operation},
        )
        return self._result(False, FlowReason.PERMISSION_DENIED)

    def _result(
        self,
        ok: bool,
        reason: FlowReason | None,
        detail: str | None = None,
    ) -> FlowResult:
        return FlowResult(
            ok=ok,
            state=self.state,
            reason=reason,
            message=message_for(reason, detail),
        )

    def _transition(
        self,
        target: LifecycleState,
        *,
        trigger: str,
        reason: FlowReason | None = None,
    ) -> None:
        previous = self.state
        if previous == target:
            return
        result = self._fsm.transition(
            target,
            trigger=trigger,
            reason=reason.value if reason else None,
        )
        if not result.success:
            logger.warning(
                "session_transition_rejected",
                extra={
                    "tenant_id": self._tenant_id,
                    "from_state": previous.value,
                    "to_state": target.value,
                    "error": result.error_reason,
                },
            )
            return

        self._session.lifecycle_state = target
        log_transition(
            logger,
            self._tenant_id,
            previous.value,
            target.value,
            trigger=trigger,
            reason=reason.value if reason else None,
        )
        self._notify(
            StateChange(
                tenant_id=self._tenant_id,
                previous=previous,
                current=target,
                session=self._session.snapshot(),
                reason=reason,
            )
        )

    def _notify(self, change: StateChange) -> None:
        for listener in list(self._listeners):
            if listener not in self._listeners:
                continue
            try:
                listener(change)
            except Exception:
                logger.exception(
                    "session_listener_failed",
                    extra={"tenant_id": self._tenant_id},
                )


def _reason_for(exc: SessionBridgeError) -> FlowReason:
    if isinstance(exc, UnauthorizedError):
        return FlowReason.REAUTH_REQUIRED
    if isinstance(exc, UnreachableError):
        return FlowReason.UNREACHABLE
    if isinstance(exc, UnexpectedError):
        return FlowReason.UNEXPECTED
    return FlowReason.FAILED
