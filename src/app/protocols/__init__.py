"""Protocolos e contratos do core da aplicação."""

from .collaborators import InvoicePayloadProviderProtocol, RecipientDirectoryProtocol
from .session_backend import SessionBackendProtocol

__all__ = [
    "InvoicePayloadProviderProtocol",
    "RecipientDirectoryProtocol",
    "SessionBackendProtocol",
]
