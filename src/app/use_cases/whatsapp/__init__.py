"""Use cases específicos de WhatsApp."""

from .deep_link import build_manual_link, normalize_phone
from .dispatcher import MessageDispatcher
from .send_invoice import SendInvoiceUseCase

__all__ = [
    # Despacho (live ou fallback manual)
    "MessageDispatcher",
    "build_manual_link",
    "normalize_phone",
    # Fatura
    "SendInvoiceUseCase",
]
