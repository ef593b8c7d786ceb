"""Contexto de rastreamento (correlation_id e tenant_id) para logs.

Usa ContextVar para ser async-safe: cada task do asyncio herda uma cópia
do contexto no momento em que é criada, então o polling em background
continua logando o tenant que o iniciou.

Uso:
    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_tenant_id: ContextVar[str] = ContextVar("tenant_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (string vazia se ausente)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or str(uuid.uuid4())
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def get_tenant_id() -> str:
    """Retorna o tenant_id do contexto atual."""
    return _tenant_id.get()


def set_tenant_id(tenant_id: str) -> Token[str]:
    """Define o tenant_id no contexto atual."""
    return _tenant_id.set(tenant_id)


def reset_tenant_id(token: Token[str]) -> None:
    """Restaura o tenant_id ao valor anterior."""
    _tenant_id.reset(token)
