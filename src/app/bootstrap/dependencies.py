"""Factories de componentes — criação de implementações concretas.

Centraliza o wiring do cliente do backend, do registro de sessões e do
despacho a partir das configurações de ambiente.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.connectors.session_backend import create_session_backend_client
from app.sessions.registry import SessionRegistry
from app.use_cases.whatsapp import MessageDispatcher, SendInvoiceUseCase
from config.settings import get_dispatch_settings, get_pairing_settings

if TYPE_CHECKING:
    from api.connectors.session_backend import SessionBackendHttpClient
    from app.protocols import (
        InvoicePayloadProviderProtocol,
        RecipientDirectoryProtocol,
        SessionBackendProtocol,
    )

logger = logging.getLogger(__name__)


def create_session_backend() -> SessionBackendHttpClient:
    """Cria cliente HTTP do backend de sessão com settings do ambiente."""
    client = create_session_backend_client()
    logger.info(
        "session_backend_client_created",
        extra={"component": "bootstrap", "endpoint": client.settings.api_endpoint},
    )
    return client


def create_session_registry(backend: SessionBackendProtocol) -> SessionRegistry:
    """Cria o registro de controladores por tenant."""
    return SessionRegistry(backend, get_pairing_settings())


def create_dispatcher(
    registry: SessionRegistry,
    backend: SessionBackendProtocol,
) -> MessageDispatcher:
    """Cria o despacho de mensagens ligado ao registro de sessões."""
    return MessageDispatcher(registry, backend, get_dispatch_settings())


def create_send_invoice_use_case(
    dispatcher: MessageDispatcher,
    payload_provider: InvoicePayloadProviderProtocol,
    recipient_directory: RecipientDirectoryProtocol,
) -> SendInvoiceUseCase:
    """Cria o caso de uso de envio de fatura com os colaboradores do host."""
    return SendInvoiceUseCase(dispatcher, payload_provider, recipient_directory)
