"""Helpers de logging do backend de sessão (sem credenciais nem PII)."""

from __future__ import annotations

import logging

from utils.errors import SessionBridgeError

logger = logging.getLogger(__name__)


def log_backend_error(
    error: SessionBridgeError,
    method: str,
    endpoint: str,
    tenant_id: str,
) -> None:
    """Loga erro do backend sem expor dados sensíveis."""
    logger.warning(
        "session_backend_error",
        extra={
            "method": method,
            "endpoint": endpoint,
            "tenant_id": tenant_id,
            "error_type": type(error).__name__,
            "error_reason": error.reason,
            "status_code": error.status_code,
        },
    )


def log_success(
    method: str,
    endpoint: str,
    status_code: int,
    tenant_id: str,
) -> None:
    """Loga sucesso sem expor dados sensíveis."""
    logger.debug(
        "session_backend_ok",
        extra={
            "method": method,
            "endpoint": endpoint,
            "status_code": status_code,
            "tenant_id": tenant_id,
        },
    )
