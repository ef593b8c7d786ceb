"""Testes do SessionBackendHttpClient com httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from api.connectors.session_backend import SessionBackendHttpClient
from app.sessions.models import BackendState, MessageRequest
from config.settings import SessionBackendSettings
from tests.fakes.fake_session_backend import manager_ctx
from utils.errors import UnauthorizedError, UnexpectedError, UnreachableError

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler, **settings: object) -> SessionBackendHttpClient:
    return SessionBackendHttpClient(
        SessionBackendSettings(base_url="http://backend.test", **settings),  # type: ignore[arg-type]
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    @pytest.mark.asyncio
    async def test_check_status_sends_identity_headers_and_parses_aliases(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"status": "authenticating", "qrCode": "2@abc", "phoneNumber": None},
            )

        client = _client(handler)
        snapshot = await client.check_status(manager_ctx())
        await client.aclose()

        assert snapshot.state == BackendState.AUTHENTICATING
        assert snapshot.qr == "2@abc"
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/api/whatsapp/session/status"
        assert request.url.params["tenantId"] == "tenant-1"
        assert request.headers["Authorization"] == "Bearer token-abc"
        assert request.headers["X-Tenant-ID"] == "tenant-1"
        assert request.headers["X-User-ID"] == "user-1"
        assert request.headers["X-User-Role"] == "customer"

    @pytest.mark.asyncio
    async def test_initialize_and_terminate_accept_success_field(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"tenantId": "tenant-1"}
            return httpx.Response(200, json={"success": True, "message": "ok"})

        client = _client(handler)
        initialized = await client.initialize(manager_ctx())
        terminated = await client.terminate(manager_ctx())
        await client.aclose()

        assert initialized.accepted is True
        assert terminated.message == "ok"

    @pytest.mark.asyncio
    async def test_send_posts_message_payload(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True})

        client = _client(handler)
        receipt = await client.send(
            manager_ctx(),
            MessageRequest(recipient="919876543210", body="hi", attachment_ref="inv.pdf"),
        )
        await client.aclose()

        assert receipt.accepted is True
        assert bodies == [
            {
                "tenantId": "tenant-1",
                "phoneNumber": "919876543210",
                "message": "hi",
                "attachmentRef": "inv.pdf",
            }
        ]

    @pytest.mark.asyncio
    async def test_send_bulk_maps_errors_to_recipient_indexes(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "total": 3,
                    "successful": 2,
                    "failed": 1,
                    "results": [],
                    "errors": [{"phoneNumber": "913", "error": "not on whatsapp"}],
                },
            )

        client = _client(handler)
        bulk = await client.send_bulk(manager_ctx(), ["911", "912", "913"], "promo")
        await client.aclose()

        assert (bulk.total, bulk.successful, bulk.failed) == (3, 2, 1)
        assert bulk.per_recipient_errors[0].index == 2
        assert bulk.per_recipient_errors[0].error == "not on whatsapp"

    @pytest.mark.asyncio
    async def test_inconsistent_bulk_counts_are_unexpected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"total": 3, "successful": 3, "failed": 1})

        client = _client(handler)
        with pytest.raises(UnexpectedError):
            await client.send_bulk(manager_ctx(), ["911"], "promo")
        await client.aclose()


class TestErrorMapping:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_auth_failures_are_unauthorized(self, status_code: int) -> None:
        client = _client(lambda request: httpx.Response(status_code, json={"error": "denied"}))

        with pytest.raises(UnauthorizedError) as exc_info:
            await client.check_status(manager_ctx())
        await client.aclose()

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [429, 500, 503])
    async def test_transient_statuses_are_unreachable(self, status_code: int) -> None:
        client = _client(lambda request: httpx.Response(status_code))

        with pytest.raises(UnreachableError):
            await client.check_status(manager_ctx())
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connect_error_is_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(UnreachableError):
            await client.initialize(manager_ctx())
        await client.aclose()

    @pytest.mark.asyncio
    async def test_other_client_errors_carry_backend_message(self) -> None:
        client = _client(
            lambda request: httpx.Response(400, json={"success": False, "message": "Tenant not provisioned"})
        )

        with pytest.raises(UnexpectedError) as exc_info:
            await client.initialize(manager_ctx())
        await client.aclose()

        assert str(exc_info.value) == "Tenant not provisioned"

    @pytest.mark.asyncio
    async def test_invalid_json_is_unexpected(self) -> None:
        client = _client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

        with pytest.raises(UnexpectedError):
            await client.check_status(manager_ctx())
        await client.aclose()

    @pytest.mark.asyncio
    async def test_unknown_status_value_is_unexpected(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"status": "banana"}))

        with pytest.raises(UnexpectedError):
            await client.check_status(manager_ctx())
        await client.aclose()

    @pytest.mark.asyncio
    async def test_empty_credential_fails_before_io(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        client = _client(handler)
        with pytest.raises(UnauthorizedError):
            await client.check_status(manager_ctx(credential="  "))
        await client.aclose()

        assert calls == []

    @pytest.mark.asyncio
    async def test_transport_retry_when_configured(self) -> None:
        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            if len(attempts) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"state": "authenticated", "phoneNumber": "5511"})

        client = _client(handler, max_retries=1)
        client._config.backoff_base_seconds = 0.0
        snapshot = await client.check_status(manager_ctx())
        await client.aclose()

        assert snapshot.is_authenticated
        assert len(attempts) == 2
