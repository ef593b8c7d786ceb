"""Conector do backend de sessão WhatsApp Web.

Único ponto de IO com o serviço que mantém a sessão pareada do tenant.
"""

from .backend_errors import error_for_status, extract_error_message, translate_http_error
from .http_base import HttpClient, HttpClientConfig, HttpError
from .http_client import SessionBackendHttpClient, create_session_backend_client

__all__ = [
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "SessionBackendHttpClient",
    "create_session_backend_client",
    "error_for_status",
    "extract_error_message",
    "translate_http_error",
]
