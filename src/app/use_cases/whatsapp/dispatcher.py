"""Despacho de mensagens pela sessão pareada, com fallback manual.

Sem sessão AUTHENTICATED nenhum envio chega ao backend: o chamador recebe
o link de compose manual. Falhas do backend também degradam para o link.
Nenhuma operação levanta exceção.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING

from app.observability import record_dispatch
from app.sessions.models import BulkResult, DispatchMode, DispatchResult, MessageRequest
from app.use_cases.whatsapp.deep_link import build_manual_link, normalize_phone
from config.logging import log_fallback, mask_phone
from config.settings import DispatchSettings
from utils.errors import SessionBridgeError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.protocols import SessionBackendProtocol
    from app.sessions.models import SendReceipt, TenantContext
    from app.sessions.registry import SessionRegistry

logger = logging.getLogger(__name__)

COMPONENT = "message_dispatch"


class MessageDispatcher:
    """Envia mensagens únicas, em massa e broadcasts de um tenant."""

    def __init__(
        self,
        registry: SessionRegistry,
        backend: SessionBackendProtocol,
        settings: DispatchSettings | None = None,
    ) -> None:
        self._registry = registry
        self._backend = backend
        self._settings = settings or DispatchSettings()

    def is_live(self, ctx: TenantContext) -> bool:
        """True se o tenant tem sessão AUTHENTICATED (leitura sem I/O)."""
        controller = self._registry.get(ctx.tenant_id)
        return controller is not None and controller.status().is_authenticated

    async def send_one(self, ctx: TenantContext, request: MessageRequest) -> DispatchResult:
        """Envia uma mensagem (live ou manual)."""
        result = await self._send(ctx, request, live=self.is_live(ctx))
        record_dispatch(ctx.tenant_id, request.mode.value, result.manual, result.accepted)
        return result

    async def send_bulk(
        self,
        ctx: TenantContext,
        requests: Sequence[MessageRequest],
    ) -> BulkResult:
        """Envia vários pedidos com concorrência limitada; nunca aborta."""
        if not requests:
            return BulkResult.from_results([])

        live = self.is_live(ctx)
        semaphore = asyncio.Semaphore(max(self._settings.bulk_concurrency, 1))

        async def _bounded(request: MessageRequest) -> DispatchResult:
            async with semaphore:
                bulk_request = dataclasses.replace(request, mode=DispatchMode.BULK)
                return await self._send(ctx, bulk_request, live=live)

        results = await asyncio.gather(*(_bounded(r) for r in requests))
        bulk = BulkResult.from_results(list(results))
        for result in results:
            record_dispatch(ctx.tenant_id, DispatchMode.BULK.value, result.manual, result.accepted)
        logger.info(
            "bulk_dispatch_completed",
            extra={
                "tenant_id": ctx.tenant_id,
                "total": bulk.total,
                "successful": bulk.successful,
                "failed": bulk.failed,
                "live": live,
            },
        )
        return bulk

    async def broadcast(
        self,
        ctx: TenantContext,
        recipients: Sequence[str],
        body: str,
    ) -> BulkResult:
        """Mesmo corpo para vários números via send-bulk do backend.

        Sem sessão pareada devolve um link manual por destinatário.
        """
        if not recipients:
            return BulkResult.from_results([])

        if not self.is_live(ctx):
            log_fallback(logger, COMPONENT, reason="session_not_authenticated")
            return BulkResult.from_results(
                [self._manual(r, body, accepted=True) for r in recipients]
            )

        numbers = [normalize_phone(r, self._settings.default_country_code) for r in recipients]
        try:
            bulk = await self._backend.send_bulk(ctx, numbers, body)
        except SessionBridgeError as exc:
            logger.warning(
                "broadcast_backend_failed",
                extra={"tenant_id": ctx.tenant_id, "error_reason": exc.reason},
            )
            log_fallback(logger, COMPONENT, reason=exc.reason)
            return BulkResult.from_results(
                [self._manual(r, body, accepted=False, error=exc.reason) for r in recipients]
            )

        record_dispatch(ctx.tenant_id, DispatchMode.BULK.value, False, bulk.failed == 0)
        return bulk

    async def _send(
        self,
        ctx: TenantContext,
        request: MessageRequest,
        *,
        live: bool,
    ) -> DispatchResult:
        recipient = normalize_phone(request.recipient, self._settings.default_country_code)
        if not recipient:
            return DispatchResult(
                recipient=request.recipient,
                accepted=False,
                manual=False,
                error="invalid_recipient",
            )

        if not live:
            log_fallback(logger, COMPONENT, reason="session_not_authenticated")
            return self._manual(request.recipient, request.body, accepted=True)

        try:
            receipt = await self._backend.send(
                ctx,
                dataclasses.replace(request, recipient=recipient),
            )
        except SessionBridgeError as exc:
            logger.warning(
                "dispatch_backend_failed",
                extra={
                    "tenant_id": ctx.tenant_id,
                    "recipient": mask_phone(recipient),
                    "error_reason": exc.reason,
                },
            )
            log_fallback(logger, COMPONENT, reason=exc.reason)
            return self._manual(request.recipient, request.body, accepted=False, error=exc.reason)
        except Exception:
            logger.exception(
                "dispatch_unexpected_error",
                extra={"tenant_id": ctx.tenant_id, "recipient": mask_phone(recipient)},
            )
            return self._manual(request.recipient, request.body, accepted=False, error="unexpected")

        return self._from_receipt(request, receipt)

    def _from_receipt(self, request: MessageRequest, receipt: SendReceipt) -> DispatchResult:
        if receipt.accepted:
            return DispatchResult(
                recipient=request.recipient,
                accepted=True,
                manual=receipt.manual,
                deep_link=receipt.deep_link if receipt.manual else None,
            )
        return self._manual(
            request.recipient,
            request.body,
            accepted=False,
            error=receipt.error or "not_accepted",
        )

    def _manual(
        self,
        recipient: str,
        body: str,
        *,
        accepted: bool,
        error: str | None = None,
    ) -> DispatchResult:
        try:
            link = build_manual_link(
                recipient,
                body,
                base_url=self._settings.deep_link_base_url,
                default_country_code=self._settings.default_country_code,
            )
        except ValueError:
            return DispatchResult(
                recipient=recipient,
                accepted=False,
                manual=False,
                error="invalid_recipient",
            )
        return DispatchResult(
            recipient=recipient,
            accepted=accepted,
            manual=True,
            deep_link=link,
            error=error,
        )
