"""Testes do registro por tenant e dos modelos de sessão."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from app.sessions.models import (
    BulkResult,
    ConnectionInfo,
    DispatchResult,
    FlowReason,
    FlowResult,
    Session,
    TenantContext,
)
from app.sessions.registry import SessionRegistry
from fsm import LifecycleState, PollerState
from tests.fakes.fake_session_backend import (
    FakeClock,
    FakeSessionBackend,
    authenticating,
    manager_ctx,
)
from utils.errors import InfrastructureError, SessionBridgeError, UnauthorizedError, UnreachableError


class TestSessionRegistry:
    def test_one_controller_per_tenant(self) -> None:
        registry = SessionRegistry(FakeSessionBackend())

        first = registry.get_or_create("tenant-a")

        assert registry.get_or_create("tenant-a") is first
        assert registry.get_or_create("tenant-b") is not first
        assert registry.get("tenant-c") is None
        assert len(registry) == 2

    def test_empty_tenant_rejected(self) -> None:
        with pytest.raises(ValueError):
            SessionRegistry(FakeSessionBackend()).get_or_create("")

    @pytest.mark.asyncio
    async def test_close_all_cancels_every_poller(self) -> None:
        backend = FakeSessionBackend()
        clock = FakeClock()
        registry = SessionRegistry(backend, clock=clock, sleep=clock.sleep)
        for tenant in ("tenant-a", "tenant-b"):
            backend.queue_status(authenticating(qr=f"qr-{tenant}"))
            await registry.get_or_create(tenant).connect(manager_ctx(tenant))

        await registry.close_all()

        for tenant in ("tenant-a", "tenant-b"):
            status = registry.get_or_create(tenant).status()
            assert status.state == LifecycleState.IDLE
            assert status.poller_state == PollerState.CANCELLED


class TestModels:
    def test_tenant_context_hides_credential(self) -> None:
        ctx = TenantContext(tenant_id="t", credential="secret-token")

        assert "secret-token" not in repr(ctx)
        assert ctx.to_log_dict()["has_credential"] is True
        assert "credential" not in ctx.to_log_dict()

    def test_session_attach_snapshot_and_clear(self) -> None:
        session = Session(tenant_id="t")
        connected_at = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        session.attach(ConnectionInfo(phone_number="5511", profile_name="Loja"), "Ana", connected_at)

        snapshot = session.snapshot()
        session.clear()

        assert snapshot.phone_number == "5511"
        assert snapshot.connected_at == connected_at
        assert session.snapshot().phone_number is None

    def test_flow_result_to_dict(self) -> None:
        result = FlowResult(
            ok=False,
            state=LifecycleState.IDLE,
            reason=FlowReason.REAUTH_REQUIRED,
            message="login again",
        )

        assert result.to_dict() == {
            "ok": False,
            "state": "IDLE",
            "reason": "reauth_required",
            "message": "login again",
            "reauth_required": True,
        }

    def test_bulk_result_from_results_keeps_order_and_counts(self) -> None:
        results = [
            DispatchResult(recipient="a", accepted=True, manual=False),
            DispatchResult(recipient="b", accepted=False, manual=True, error="unreachable"),
            DispatchResult(recipient="c", accepted=False, manual=False),
        ]

        bulk = BulkResult.from_results(results)

        assert (bulk.total, bulk.successful, bulk.failed) == (3, 1, 2)
        assert [(e.index, e.recipient, e.error) for e in bulk.per_recipient_errors] == [
            (1, "b", "unreachable"),
            (2, "c", "not_accepted"),
        ]

    def test_bulk_result_rejects_inconsistent_counts(self) -> None:
        with pytest.raises(ValueError):
            BulkResult(total=3, successful=1, failed=1)


class TestErrors:
    def test_unreachable_is_infrastructure_error(self) -> None:
        assert isinstance(UnreachableError("down"), InfrastructureError)

    def test_error_defaults_to_reason_and_keeps_status_code(self) -> None:
        error = UnauthorizedError(status_code=401)

        assert isinstance(error, SessionBridgeError)
        assert str(error) == "unauthorized"
        assert error.status_code == 401
