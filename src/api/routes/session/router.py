"""Endpoints da sessão WhatsApp do tenant (pareamento e envio).

Contexto do chamador vem dos headers Authorization, X-Tenant-ID,
X-User-ID, X-User-Name e X-User-Role. Sem tenant ou credencial: 401.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.observability import reset_tenant_id, set_tenant_id
from app.sessions.models import ControllerStatus, FlowReason, MessageRequest, TenantContext

if TYPE_CHECKING:
    from app.sessions.controller import SessionController
    from app.sessions.models import FlowResult
    from app.sessions.registry import SessionRegistry
    from app.use_cases.whatsapp import MessageDispatcher

logger = logging.getLogger(__name__)

router = APIRouter()

_FLOW_STATUS_CODES: dict[FlowReason, int] = {
    FlowReason.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    FlowReason.REAUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    FlowReason.ALREADY_IN_PROGRESS: status.HTTP_409_CONFLICT,
}


class SendMessageBody(BaseModel):
    """Pedido de envio individual."""

    model_config = ConfigDict(extra="ignore")

    recipient: str = Field(min_length=1)
    body: str
    attachment_ref: str | None = None


class SendBulkBody(BaseModel):
    """Envio em massa: mesmo corpo (recipients + body) ou pedidos individuais."""

    model_config = ConfigDict(extra="ignore")

    recipients: list[str] = Field(default_factory=list)
    body: str = ""
    messages: list[SendMessageBody] = Field(default_factory=list)


def _tenant_context(request: Request) -> TenantContext | None:
    authorization = request.headers.get("authorization", "")
    scheme, _, credential = authorization.partition(" ")
    tenant_id = request.headers.get("x-tenant-id", "").strip()
    if scheme.lower() != "bearer" or not credential.strip() or not tenant_id:
        return None
    return TenantContext(
        tenant_id=tenant_id,
        user_id=request.headers.get("x-user-id", ""),
        user_name=request.headers.get("x-user-name", ""),
        role=request.headers.get("x-user-role", ""),
        credential=credential.strip(),
    )


def _unauthorized() -> JSONResponse:
    return JSONResponse(
        content={"ok": False, "reason": "unauthorized", "message": "Missing tenant or credential"},
        status_code=status.HTTP_401_UNAUTHORIZED,
    )


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


def _dispatcher(request: Request) -> MessageDispatcher:
    return request.app.state.message_dispatcher


def _controller(request: Request, ctx: TenantContext) -> SessionController:
    return _registry(request).get_or_create(ctx.tenant_id)


def _flow_response(result: FlowResult) -> JSONResponse:
    status_code = status.HTTP_200_OK
    if not result.ok and result.reason is not None:
        status_code = _FLOW_STATUS_CODES.get(result.reason, status.HTTP_200_OK)
    return JSONResponse(content=result.to_dict(), status_code=status_code)


def _status_payload(current: ControllerStatus) -> dict[str, Any]:
    session = current.session
    return {
        "tenant_id": current.tenant_id,
        "state": current.state.value,
        "authenticated": current.is_authenticated,
        "session": {
            "phone_number": session.phone_number,
            "profile_name": session.profile_name,
            "connected_by": session.connected_by,
            "connected_at": session.connected_at.isoformat() if session.connected_at else None,
        },
        "qr": current.qr.payload if current.qr else None,
        "qr_stale": current.qr_stale,
        "last_reason": current.last_reason.value if current.last_reason else None,
        "poller_state": current.poller_state.value if current.poller_state else None,
    }


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Estado atual da sessão do tenant (sem I/O no backend)."""
    ctx = _tenant_context(request)
    if ctx is None:
        return _unauthorized()
    # Leitura não cria controlador; tenant desconhecido é IDLE
    controller = _registry(request).get(ctx.tenant_id)
    current = controller.status() if controller else ControllerStatus.idle(ctx.tenant_id)
    return JSONResponse(content=_status_payload(current))


@router.post("/connect")
async def connect(request: Request) -> JSONResponse:
    ctx = _tenant_context(request)
    if ctx is None:
        return _unauthorized()
    token = set_tenant_id(ctx.tenant_id)
    try:
        return _flow_response(await _controller(request, ctx).connect(ctx))
    finally:
        reset_tenant_id(token)


@router.post("/regenerate")
async def regenerate(request: Request) -> JSONResponse:
    ctx = _tenant_context(request)
    if ctx is None:
        return _unauthorized()
    token = set_tenant_id(ctx.tenant_id)
    try:
        return _flow_response(await _controller(request, ctx).regenerate(ctx))
    finally:
        reset_tenant_id(token)


@router.post("/confirm")
async def confirm(request: Request) -> JSONResponse:
    ctx = _tenant_context(request)
    if ctx is None:
        return _unauthorized()
    token = set_tenant_id(ctx.tenant_id)
    try:
        return _flow_response(await _controller(request, ctx).confirm(ctx))
    finally:
        reset_tenant_id(token)


@router.post("/disconnect")
async def disconnect(request: Request) -> JSONResponse:
    ctx = _tenant_context(request)
    if ctx is None:
        return _unauthorized()
    token = set_tenant_id(ctx.tenant_id)
    try:
        return _flow_response(await _controller(request, ctx).disconnect(ctx))
    finally:
        reset_tenant_id(token)


@router.post("/messages/send")
async def send_message(request: Request, payload: SendMessageBody) -> JSONResponse:
    """Envia uma mensagem; sem sessão pareada devolve o link manual."""
    ctx = _tenant_context(request)
    if ctx is None:
        return _unauthorized()
    token = set_tenant_id(ctx.tenant_id)
    try:
        result = await _dispatcher(request).send_one(
            ctx,
            MessageRequest(
                recipient=payload.recipient,
                body=payload.body,
                attachment_ref=payload.attachment_ref,
            ),
        )
    finally:
        reset_tenant_id(token)
    return JSONResponse(content=result.to_dict())


@router.post("/messages/send-bulk")
async def send_bulk(request: Request, payload: SendBulkBody) -> JSONResponse:
    """Envio em massa. Falhas por destinatário não abortam o lote."""
    ctx = _tenant_context(request)
    if ctx is None:
        return _unauthorized()
    if not payload.messages and not payload.recipients:
        return JSONResponse(
            content={"ok": False, "reason": "invalid_request", "message": "No recipients"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    token = set_tenant_id(ctx.tenant_id)
    try:
        dispatcher = _dispatcher(request)
        if payload.messages:
            requests = [
                MessageRequest(
                    recipient=m.recipient,
                    body=m.body,
                    attachment_ref=m.attachment_ref,
                )
                for m in payload.messages
            ]
            result = await dispatcher.send_bulk(ctx, requests)
        else:
            result = await dispatcher.broadcast(ctx, payload.recipients, payload.body)
    finally:
        reset_tenant_id(token)

    logger.info(
        "session_bulk_request_handled",
        extra={"tenant_id": ctx.tenant_id, "total": result.total, "failed": result.failed},
    )
    return JSONResponse(content=result.to_dict())
