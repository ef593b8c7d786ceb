"""Exceções de domínio para a sessão WhatsApp e falhas de infraestrutura."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class SessionBridgeError(Exception):
    """Base para erros do controlador de sessão e do despacho."""

    reason: str = "unexpected"

    def __init__(self, message: str = "", *, status_code: int | None = None) -> None:
        super().__init__(message or self.reason)
        self.status_code = status_code


class UnauthorizedError(SessionBridgeError):
    """Credencial rejeitada pelo backend. Nunca é retentado."""

    reason = "unauthorized"


class UnreachableError(SessionBridgeError, InfrastructureError):
    """Backend inacessível (timeout, conexão, 429, 5xx)."""

    reason = "unreachable"


class UnexpectedError(SessionBridgeError):
    """Erro não classificado do backend, repassado literalmente."""

    reason = "unexpected"

