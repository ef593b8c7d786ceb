"""Mensagens exibíveis ao usuário por motivo de fluxo.

Strings acionáveis: dizem o que aconteceu e o que fazer em seguida.
"""

from __future__ import annotations

from app.sessions.models import FlowReason

REASON_MESSAGES: dict[FlowReason, str] = {
    FlowReason.PERMISSION_DENIED: (
        "Only customer users can manage the WhatsApp connection for this account."
    ),
    FlowReason.REAUTH_REQUIRED: "Your login has expired. Please sign in again to continue.",
    FlowReason.UNREACHABLE: (
        "Unable to reach the WhatsApp service. Check your connection and try again."
    ),
    FlowReason.EXPIRED: "QR code expired. Please generate a new one and scan it again.",
    FlowReason.FAILED: "Unable to check connection status. Please try again.",
    FlowReason.ALREADY_IN_PROGRESS: (
        "A WhatsApp connection is already being set up. Finish scanning the current QR code "
        "or generate a new one."
    ),
    FlowReason.UNEXPECTED: "The WhatsApp service returned an unexpected error.",
    FlowReason.QR_UNAVAILABLE: "The QR code could not be generated. Please try again.",
    FlowReason.LOGGED_OUT: "WhatsApp was logged out on the phone. Connect again to continue.",
    FlowReason.CANCELLED: "The connection attempt was cancelled.",
}


def message_for(reason: FlowReason | None, detail: str | None = None) -> str | None:
    """Mensagem para o motivo; UNEXPECTED repassa o detalhe do backend."""
    if reason is None:
        return None
    if reason == FlowReason.UNEXPECTED and detail:
        return detail
    return REASON_MESSAGES[reason]
