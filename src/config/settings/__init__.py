"""Agregador de settings do serviço de sessão WhatsApp.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    VALID_LOG_LEVELS,
    BaseSettings,
    Environment,
    get_base_settings,
)

# Dispatch settings
from config.settings.dispatch import (
    DEFAULT_DEEP_LINK_BASE_URL,
    DispatchSettings,
    get_dispatch_settings,
)

# Pairing settings
from config.settings.pairing import (
    DEFAULT_MANAGER_ROLES,
    PairingSettings,
    get_pairing_settings,
)

# Backend settings
from config.settings.session_backend import (
    DEFAULT_API_PREFIX,
    DEFAULT_BACKEND_BASE_URL,
    SessionBackendSettings,
    get_session_backend_settings,
)

__all__ = [
    "DEFAULT_API_PREFIX",
    "DEFAULT_BACKEND_BASE_URL",
    "DEFAULT_DEEP_LINK_BASE_URL",
    "DEFAULT_MANAGER_ROLES",
    "VALID_LOG_LEVELS",
    "BaseSettings",
    "DispatchSettings",
    "Environment",
    "PairingSettings",
    "SessionBackendSettings",
    "get_base_settings",
    "get_dispatch_settings",
    "get_pairing_settings",
    "get_session_backend_settings",
]
