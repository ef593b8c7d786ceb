"""Classificação de erros do backend de sessão em erros tipados."""

from __future__ import annotations

from typing import Any

from api.connectors.session_backend.http_base import HttpError
from utils.errors import (
    SessionBridgeError,
    UnauthorizedError,
    UnexpectedError,
    UnreachableError,
)

UNAUTHORIZED_STATUS_CODES = frozenset({401, 403})


def is_unreachable_status(status_code: int | None) -> bool:
    """429 e 5xx indicam backend indisponível (transitório)."""
    if status_code is None:
        return True
    return status_code == 429 or status_code >= 500


def extract_error_message(response_data: Any) -> str | None:
    """Extrai a mensagem de erro do corpo JSON do backend, se houver.

    Aceita {"error": "..."}, {"error": {"message": "..."}} e
    {"success": false, "message": "..."}.
    """
    if not isinstance(response_data, dict):
        return None

    error_obj = response_data.get("error")
    if isinstance(error_obj, dict):
        message = error_obj.get("message")
        return str(message) if message else None
    if isinstance(error_obj, str) and error_obj:
        return error_obj

    if response_data.get("success") is False and response_data.get("message"):
        return str(response_data["message"])

    return None


def error_for_status(status_code: int, response_data: Any = None) -> SessionBridgeError:
    """Converte status HTTP >= 400 em erro tipado (mensagem repassada literalmente)."""
    message = extract_error_message(response_data) or f"http_status_{status_code}"
    if status_code in UNAUTHORIZED_STATUS_CODES:
        return UnauthorizedError(message, status_code=status_code)
    if is_unreachable_status(status_code):
        return UnreachableError(message, status_code=status_code)
    return UnexpectedError(message, status_code=status_code)


def translate_http_error(exc: HttpError) -> SessionBridgeError:
    """Converte HttpError do cliente base em erro tipado."""
    if exc.is_retryable or is_unreachable_status(exc.status_code):
        return UnreachableError(str(exc), status_code=exc.status_code)
    if exc.status_code in UNAUTHORIZED_STATUS_CODES:
        return UnauthorizedError(str(exc), status_code=exc.status_code)
    return UnexpectedError(str(exc), status_code=exc.status_code)
