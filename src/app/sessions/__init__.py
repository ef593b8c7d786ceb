"""Sessão WhatsApp compartilhada por tenant.

Exporta modelos, permissões e os componentes do pareamento
(holder do QR, poller, controlador e registro por tenant).
"""

from app.sessions.controller import SessionController
from app.sessions.models import (
    BackendAck,
    BackendState,
    BulkResult,
    ConnectionInfo,
    ControllerStatus,
    DispatchMode,
    DispatchResult,
    FlowReason,
    FlowResult,
    InvoicePayload,
    MessageRequest,
    PollAttempt,
    PollOutcome,
    QRChallenge,
    RecipientError,
    SendReceipt,
    Session,
    SessionSnapshot,
    StateChange,
    StatusSnapshot,
    TenantContext,
)
from app.sessions.permissions import can_manage, can_send_invoice
from app.sessions.poller import SessionPoller
from app.sessions.qr_holder import QRChallengeHolder
from app.sessions.registry import SessionRegistry

__all__ = [
    "BackendAck",
    "BackendState",
    "BulkResult",
    "ConnectionInfo",
    "ControllerStatus",
    "DispatchMode",
    "DispatchResult",
    "FlowReason",
    "FlowResult",
    "InvoicePayload",
    "MessageRequest",
    "PollAttempt",
    "PollOutcome",
    "QRChallenge",
    "QRChallengeHolder",
    "RecipientError",
    "SendReceipt",
    "Session",
    "SessionController",
    "SessionPoller",
    "SessionRegistry",
    "SessionSnapshot",
    "StateChange",
    "StatusSnapshot",
    "TenantContext",
    "can_manage",
    "can_send_invoice",
]
