"""Permissões do chamador sobre a sessão compartilhada do tenant.

Funções puras, sem I/O: decidem antes de qualquer chamada de rede.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from config.settings import DEFAULT_MANAGER_ROLES

if TYPE_CHECKING:
    from collections.abc import Iterable

    from app.sessions.models import TenantContext


def can_manage(ctx: TenantContext, manager_roles: Iterable[str] = DEFAULT_MANAGER_ROLES) -> bool:
    """True se o role pode criar, regenerar ou desconectar a sessão."""
    role = (ctx.role or "").strip().lower()
    if not role:
        return False
    return role in {r.strip().lower() for r in manager_roles}


def can_send_invoice(ctx: TenantContext) -> bool:
    """True se o usuário tem a capacidade de enviar faturas pelo WhatsApp."""
    return bool(ctx.can_send_invoice_whatsapp)
