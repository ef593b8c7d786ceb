"""Caso de uso: enviar fatura pelo WhatsApp.

Resolve o telefone do cliente/fornecedor, pede o conteúdo ao provedor de
fatura e delega ao MessageDispatcher.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from app.sessions.models import BulkResult, DispatchResult, MessageRequest
from app.sessions.permissions import can_send_invoice

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.protocols import InvoicePayloadProviderProtocol, RecipientDirectoryProtocol
    from app.sessions.models import InvoicePayload, TenantContext
    from app.use_cases.whatsapp.dispatcher import MessageDispatcher

logger = logging.getLogger(__name__)


class SendInvoiceUseCase:
    """Envia uma fatura a um ou vários destinatários."""

    def __init__(
        self,
        dispatcher: MessageDispatcher,
        payload_provider: InvoicePayloadProviderProtocol,
        recipient_directory: RecipientDirectoryProtocol,
    ) -> None:
        self._dispatcher = dispatcher
        self._payload_provider = payload_provider
        self._recipient_directory = recipient_directory

    async def execute(
        self,
        ctx: TenantContext,
        invoice_id: str,
        entity_id: str,
        phone_override: str | None = None,
    ) -> DispatchResult:
        """Envia a fatura a um destinatário.

        phone_override substitui o telefone do cadastro (editado pelo usuário).
        """
        if not can_send_invoice(ctx):
            return _failure(entity_id, "permission_denied")

        phone = phone_override or await self._resolve_phone(ctx, entity_id)
        if not phone:
            return _failure(entity_id, "recipient_unresolved")

        payload = await self._build_payload(ctx, invoice_id)
        if payload is None:
            return _failure(phone, "payload_unavailable")

        request = MessageRequest(
            recipient=phone,
            body=payload.body,
            attachment_ref=payload.attachment_ref,
        )
        return await self._dispatcher.send_one(ctx, request)

    async def execute_bulk(
        self,
        ctx: TenantContext,
        invoice_id: str,
        entity_ids: Sequence[str],
    ) -> BulkResult:
        """Envia a mesma fatura a vários destinatários, na ordem informada."""
        if not can_send_invoice(ctx):
            return BulkResult.from_results(
                [_failure(entity_id, "permission_denied") for entity_id in entity_ids]
            )

        payload = await self._build_payload(ctx, invoice_id)
        if payload is None:
            return BulkResult.from_results(
                [_failure(entity_id, "payload_unavailable") for entity_id in entity_ids]
            )

        phones = await asyncio.gather(
            *(self._resolve_phone(ctx, e) for e in entity_ids)
        )
        requests = [
            MessageRequest(recipient=phone, body=payload.body, attachment_ref=payload.attachment_ref)
            for phone in phones
            if phone
        ]
        sent = iter((await self._dispatcher.send_bulk(ctx, requests)).results)

        results = [
            next(sent) if phone else _failure(entity_id, "recipient_unresolved")
            for entity_id, phone in zip(entity_ids, phones, strict=True)
        ]
        return BulkResult.from_results(results)

    async def _resolve_phone(self, ctx: TenantContext, entity_id: str) -> str | None:
        try:
            return await self._recipient_directory.resolve_phone(ctx, entity_id)
        except Exception:
            logger.exception(
                "invoice_recipient_lookup_failed",
                extra={"tenant_id": ctx.tenant_id, "entity_id": entity_id},
            )
            return None

    async def _build_payload(self, ctx: TenantContext, invoice_id: str) -> InvoicePayload | None:
        try:
            return await self._payload_provider.build_invoice_payload(ctx, invoice_id)
        except Exception:
            logger.exception(
                "invoice_payload_failed",
                extra={"tenant_id": ctx.tenant_id, "invoice_id": invoice_id},
            )
            return None


def _failure(recipient: str, error: str) -> DispatchResult:
    return DispatchResult(recipient=recipient, accepted=False, manual=False, error=error)
