"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    InfrastructureError,
    SessionBridgeError,
    UnauthorizedError,
    UnexpectedError,
    UnreachableError,
)

__all__ = [
    "InfrastructureError",
    "SessionBridgeError",
    "UnauthorizedError",
    "UnexpectedError",
    "UnreachableError",
]
