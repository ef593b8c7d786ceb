"""Contrato do backend de sessão WhatsApp Web.

O controlador, o poller e o despacho dependem deste protocolo, nunca do
cliente HTTP concreto da camada api.

Erros esperados (utils.errors): UnauthorizedError, UnreachableError,
UnexpectedError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.sessions.models import (
        BackendAck,
        BulkResult,
        MessageRequest,
        SendReceipt,
        StatusSnapshot,
        TenantContext,
    )


class SessionBackendProtocol(Protocol):
    """Operações de sessão e envio expostas pelo backend."""

    async def initialize(self, ctx: TenantContext) -> BackendAck: ...

    async def check_status(self, ctx: TenantContext) -> StatusSnapshot: ...

    async def terminate(self, ctx: TenantContext) -> BackendAck: ...

    async def send(self, ctx: TenantContext, request: MessageRequest) -> SendReceipt: ...

    async def send_bulk(
        self,
        ctx: TenantContext,
        recipients: Sequence[str],
        body: str,
    ) -> BulkResult: ...
