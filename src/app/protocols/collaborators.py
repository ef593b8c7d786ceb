"""Contratos de colaboradores externos ao subsistema de sessão.

Fatura e cadastro de clientes/fornecedores vivem fora deste serviço;
aqui só se consome o que eles produzem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.sessions.models import InvoicePayload, TenantContext


class InvoicePayloadProviderProtocol(Protocol):
    """Produz corpo de mensagem e referência de anexo de uma fatura."""

    async def build_invoice_payload(
        self,
        ctx: TenantContext,
        invoice_id: str,
    ) -> InvoicePayload: ...


class RecipientDirectoryProtocol(Protocol):
    """Resolve uma entidade de negócio (cliente/fornecedor) em telefone."""

    async def resolve_phone(self, ctx: TenantContext, entity_id: str) -> str | None: ...
