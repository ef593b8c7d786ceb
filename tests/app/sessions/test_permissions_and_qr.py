"""Testes do gate de permissões e do holder do QR."""

from __future__ import annotations

import pytest

from app.sessions.models import QRChallenge
from app.sessions.permissions import can_manage, can_send_invoice
from app.sessions.qr_holder import QRChallengeHolder
from tests.fakes.fake_session_backend import manager_ctx


class TestPermissionGate:
    @pytest.mark.parametrize(
        ("role", "expected"),
        [
            ("customer", True),
            ("  Customer ", True),
            ("admin", False),
            ("vendor", False),
            ("", False),
        ],
    )
    def test_only_manager_roles_can_manage(self, role: str, expected: bool) -> None:
        assert can_manage(manager_ctx(role=role)) is expected

    def test_custom_manager_roles(self) -> None:
        ctx = manager_ctx(role="owner")
        assert can_manage(ctx, frozenset({"Owner", "customer"})) is True
        assert can_manage(ctx) is False

    def test_invoice_capability(self) -> None:
        assert can_send_invoice(manager_ctx()) is True
        assert can_send_invoice(manager_ctx(can_send_invoice_whatsapp=False)) is False


class TestQRChallengeHolder:
    def test_empty_holder_is_stale(self) -> None:
        holder = QRChallengeHolder()
        assert holder.current is None
        assert holder.is_stale(now=0.0, freshness_window=60.0) is True

    def test_new_challenge_supersedes_previous(self) -> None:
        holder = QRChallengeHolder()
        holder.store(QRChallenge(payload="qr-1", issued_at=10.0))
        holder.store(QRChallenge(payload="qr-2", issued_at=20.0))

        assert holder.current == QRChallenge(payload="qr-2", issued_at=20.0)

    def test_staleness_boundary(self) -> None:
        holder = QRChallengeHolder()
        holder.store(QRChallenge(payload="qr-1", issued_at=100.0))

        assert holder.is_stale(now=159.9, freshness_window=60.0) is False
        assert holder.is_stale(now=160.0, freshness_window=60.0) is True

    def test_clear(self) -> None:
        holder = QRChallengeHolder()
        holder.store(QRChallenge(payload="qr-1", issued_at=0.0))
        holder.clear()
        assert holder.current is None
