"""Cliente HTTP do backend de sessão WhatsApp Web.

Implementa SessionBackendProtocol sobre HttpClient:
- Headers de identidade do chamador (Authorization, X-User-ID, X-User-Role)
- Timeout por requisição vindo de SessionBackendSettings
- Erros tipados: UnauthorizedError, UnreachableError, UnexpectedError
- Logging e latência sem credenciais nem números de telefone
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from api.connectors.session_backend.backend_errors import (
    error_for_status,
    translate_http_error,
)
from api.connectors.session_backend.backend_logging import log_backend_error, log_success
from api.connectors.session_backend.http_base import HttpClient, HttpClientConfig, HttpError
from api.connectors.session_backend.schemas import (
    AckResponse,
    BulkResponse,
    SendResponse,
    StatusResponse,
)
from app.observability import record_latency
from app.sessions.models import (
    BackendAck,
    BulkResult,
    RecipientError,
    SendReceipt,
    StatusSnapshot,
)
from config.settings import SessionBackendSettings
from utils.errors import SessionBridgeError, UnauthorizedError, UnexpectedError

if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from app.sessions.models import MessageRequest, TenantContext

logger: logging.Logger = logging.getLogger(__name__)

COMPONENT = "session_backend"


class SessionBackendHttpClient(HttpClient):
    """Cliente do backend que mantém a sessão pareada de cada tenant."""

    def __init__(
        self,
        settings: SessionBackendSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or SessionBackendSettings()
        super().__init__(
            HttpClientConfig(
                timeout_seconds=self._settings.request_timeout_seconds,
                max_retries=self._settings.max_retries,
                verify_ssl=self._settings.verify_ssl,
                default_headers={"Content-Type": "application/json"},
            ),
            transport=transport,
        )

    @property
    def settings(self) -> SessionBackendSettings:
        return self._settings

    async def initialize(self, ctx: TenantContext) -> BackendAck:
        data = await self._call("POST", "session/initialize", ctx, json={"tenantId": ctx.tenant_id})
        parsed = self._parse(AckResponse, data, "session/initialize")
        return BackendAck(accepted=parsed.accepted, message=parsed.message)

    async def check_status(self, ctx: TenantContext) -> StatusSnapshot:
        data = await self._call("GET", "session/status", ctx, params={"tenantId": ctx.tenant_id})
        parsed = self._parse(StatusResponse, data, "session/status")
        return StatusSnapshot(
            state=parsed.state,
            qr=parsed.qr or None,
            phone_number=parsed.phone_number,
            profile_name=parsed.profile_name,
        )

    async def terminate(self, ctx: TenantContext) -> BackendAck:
        data = await self._call("POST", "session/terminate", ctx, json={"tenantId": ctx.tenant_id})
        parsed = self._parse(AckResponse, data, "session/terminate")
        return BackendAck(accepted=parsed.accepted, message=parsed.message)

    async def send(self, ctx: TenantContext, request: MessageRequest) -> SendReceipt:
        payload: dict[str, Any] = {
            "tenantId": ctx.tenant_id,
            "phoneNumber": request.recipient,
            "message": request.body,
        }
        if request.attachment_ref:
            payload["attachmentRef"] = request.attachment_ref
        data = await self._call("POST", "message/send", ctx, json=payload)
        parsed = self._parse(SendResponse, data, "message/send")
        return SendReceipt(
            accepted=parsed.accepted,
            manual=parsed.manual,
            deep_link=parsed.deep_link,
            error=parsed.error,
        )

    async def send_bulk(
        self,
        ctx: TenantContext,
        recipients: Sequence[str],
        body: str,
    ) -> BulkResult:
        payload = {
            "tenantId": ctx.tenant_id,
            "phoneNumbers": list(recipients),
            "message": body,
        }
        data = await self._call("POST", "message/send-bulk", ctx, json=payload)
        parsed = self._parse(BulkResponse, data, "message/send-bulk")
        return _to_bulk_result(parsed, recipients)

    async def _call(
        self,
        method: str,
        path: str,
        ctx: TenantContext,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Executa a requisição e devolve o corpo JSON validado como dict."""
        if not ctx.credential or not ctx.credential.strip():
            logger.warning(
                "session_backend_missing_credential",
                extra={"endpoint": path, "tenant_id": ctx.tenant_id},
            )
            raise UnauthorizedError("Authentication failed, please login again")

        url = self._settings.get_endpoint(path)
        headers = _build_headers(ctx)
        started = time.perf_counter()
        try:
            response = await self._send(method, url, headers, params=params, json=json)
            data = _decode_response(response)
        except SessionBridgeError as exc:
            log_backend_error(exc, method, path, ctx.tenant_id)
            raise
        finally:
            record_latency(
                COMPONENT,
                path.replace("/", "_").replace("-", "_"),
                (time.perf_counter() - started) * 1000,
                ctx.tenant_id,
            )

        log_success(method, path, response.status_code, ctx.tenant_id)
        return data

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        *,
        params: dict[str, str] | None,
        json: dict[str, Any] | None,
    ) -> httpx.Response:
        try:
            if method == "GET":
                return await self.get(url, params=params, headers=headers)
            return await self.post(url, json=json or {}, headers=headers)
        except HttpError as exc:
            raise translate_http_error(exc) from exc

    @staticmethod
    def _parse(model: Any, data: dict[str, Any], endpoint: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error(
                "session_backend_invalid_payload",
                extra={"endpoint": endpoint, "error_count": exc.error_count()},
            )
            raise UnexpectedError(f"Invalid response from session backend ({endpoint})") from exc


def _build_headers(ctx: TenantContext) -> dict[str, str]:
    headers = {
        "Authorization": f"Bearer {ctx.credential}",
        "X-Tenant-ID": ctx.tenant_id,
    }
    if ctx.user_id:
        headers["X-User-ID"] = ctx.user_id
    if ctx.role:
        headers["X-User-Role"] = ctx.role
    return headers


def _decode_response(response: httpx.Response) -> dict[str, Any]:
    """Converte resposta em dict ou levanta erro tipado."""
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        if response.status_code >= 400:
            raise error_for_status(response.status_code) from exc
        raise UnexpectedError("Response JSON inválido") from exc

    if response.status_code >= 400:
        raise error_for_status(response.status_code, data)
    if not isinstance(data, dict):
        raise UnexpectedError("Response JSON inválido")
    return data


def _to_bulk_result(parsed: BulkResponse, recipients: Sequence[str]) -> BulkResult:
    if parsed.successful + parsed.failed != parsed.total:
        raise UnexpectedError("Inconsistent bulk counts from session backend")

    positions: dict[str, list[int]] = {}
    for index, recipient in enumerate(recipients):
        positions.setdefault(recipient, []).append(index)

    errors: list[RecipientError] = []
    for item in parsed.errors:
        queue = positions.get(item.recipient)
        index = queue.pop(0) if queue else -1
        errors.append(RecipientError(index=index, recipient=item.recipient, error=item.error))

    return BulkResult(
        total=parsed.total,
        successful=parsed.successful,
        failed=parsed.failed,
        per_recipient_errors=tuple(errors),
    )


def create_session_backend_client(
    settings: SessionBackendSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SessionBackendHttpClient:
    """Factory do cliente com settings do ambiente quando não informados."""
    # Import local para evitar dependência circular
    from config.settings import get_session_backend_settings

    return SessionBackendHttpClient(
        settings=settings or get_session_backend_settings(),
        transport=transport,
    )
