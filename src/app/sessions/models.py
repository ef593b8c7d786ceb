"""Modelos da sessão WhatsApp pareada por tenant.

Define o contexto do chamador, a sessão compartilhada do tenant, o desafio
QR, os snapshots de status do backend e os tipos de resultado devolvidos
pela API pública (controlador e despacho).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from fsm.states import DEFAULT_INITIAL_STATE, LifecycleState, PollerState


class BackendState(StrEnum):
    """Estado reportado pelo backend em check_status."""

    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    DISCONNECTED = "disconnected"


class DispatchMode(StrEnum):
    """Modo do envio."""

    SINGLE = "single"
    BULK = "bulk"


class FlowReason(StrEnum):
    """Motivo tipado devolvido ao chamador quando um fluxo não conclui."""

    PERMISSION_DENIED = "permission_denied"
    REAUTH_REQUIRED = "reauth_required"
    UNREACHABLE = "unreachable"
    EXPIRED = "expired"
    FAILED = "failed"
    ALREADY_IN_PROGRESS = "already_in_progress"
    UNEXPECTED = "unexpected"
    QR_UNAVAILABLE = "qr_unavailable"
    LOGGED_OUT = "logged_out"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class TenantContext:
    """Contexto explícito do chamador, passado a toda operação.

    Atributos:
        tenant_id: Tenant dono da sessão compartilhada
        user_id: Usuário que dispara a operação
        user_name: Nome exibível (registrado como connected_by)
        role: Role do usuário no tenant (decide a permissão de gerenciar)
        credential: Bearer token do usuário (nunca logado)
        can_send_invoice_whatsapp: Capacidade de enviar faturas pelo WhatsApp
    """

    tenant_id: str
    user_id: str = ""
    user_name: str = ""
    role: str = ""
    credential: str = field(default="", repr=False)
    can_send_invoice_whatsapp: bool = True

    def to_log_dict(self) -> dict[str, Any]:
        """Campos seguros para logs (sem credencial)."""
        return {
            "tenant_id": self.tenant_id,
            "user_id": self.user_id,
            "role": self.role,
            "has_credential": bool(self.credential),
        }


@dataclass(frozen=True, slots=True)
class QRChallenge:
    """Desafio de pareamento. Imutável; um novo QR substitui o anterior.

    Atributos:
        payload: Conteúdo do QR (string renderizável)
        issued_at: Instante de emissão no relógio monotônico (segundos)
    """

    payload: str
    issued_at: float

    def age(self, now: float) -> float:
        return now - self.issued_at


@dataclass(frozen=True, slots=True)
class ConnectionInfo:
    """Dados da conta pareada reportados pelo backend."""

    phone_number: str | None = None
    profile_name: str | None = None


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Resposta normalizada de check_status."""

    state: BackendState
    qr: str | None = None
    phone_number: str | None = None
    profile_name: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == BackendState.AUTHENTICATED

    @property
    def is_authenticating(self) -> bool:
        return self.state == BackendState.AUTHENTICATING

    def connection_info(self) -> ConnectionInfo:
        return ConnectionInfo(
            phone_number=self.phone_number,
            profile_name=self.profile_name,
        )


@dataclass(frozen=True, slots=True)
class PollAttempt:
    """Contador efêmero de uma execução de polling."""

    index: int = 0
    started_at: float = 0.0

    def advance(self) -> PollAttempt:
        return PollAttempt(index=self.index + 1, started_at=self.started_at)

    def reset(self) -> PollAttempt:
        """Zera o índice mantendo o início da execução (orçamento rígido)."""
        return PollAttempt(index=0, started_at=self.started_at)


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """Desfecho terminal de uma execução de polling."""

    state: PollerState
    info: ConnectionInfo | None = None
    error: Exception | None = None
    attempts: int = 0


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Cópia somente-leitura da sessão, entregue a quem não é o controlador."""

    tenant_id: str
    lifecycle_state: LifecycleState = DEFAULT_INITIAL_STATE
    phone_number: str | None = None
    profile_name: str | None = None
    connected_by: str | None = None
    connected_at: datetime | None = None


@dataclass(slots=True)
class Session:
    """Sessão WhatsApp compartilhada de um tenant.

    Mutável apenas pelo SessionController; demais componentes recebem
    SessionSnapshot via snapshot().
    """

    tenant_id: str
    lifecycle_state: LifecycleState = DEFAULT_INITIAL_STATE
    phone_number: str | None = None
    profile_name: str | None = None
    connected_by: str | None = None
    connected_at: datetime | None = None

    def attach(self, info: ConnectionInfo, connected_by: str, connected_at: datetime) -> None:
        """Registra os dados da conta pareada."""
        self.phone_number = info.phone_number
        self.profile_name = info.profile_name
        self.connected_by = connected_by or None
        self.connected_at = connected_at

    def clear(self) -> None:
        """Descarta os dados da conta (disconnect ou logout externo)."""
        self.phone_number = None
        self.profile_name = None
        self.connected_by = None
        self.connected_at = None

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            tenant_id=self.tenant_id,
            lifecycle_state=self.lifecycle_state,
            phone_number=self.phone_number,
            profile_name=self.profile_name,
            connected_by=self.connected_by,
            connected_at=self.connected_at,
        )


@dataclass(frozen=True, slots=True)
class ControllerStatus:
    """Leitura pura do controlador (status() nunca faz I/O)."""

    tenant_id: str
    state: LifecycleState
    session: SessionSnapshot
    qr: QRChallenge | None = None
    qr_stale: bool = False
    last_reason: FlowReason | None = None
    poller_state: PollerState | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == LifecycleState.AUTHENTICATED

    @classmethod
    def idle(cls, tenant_id: str) -> ControllerStatus:
        """Status de tenant sem controlador ativo."""
        return cls(
            tenant_id=tenant_id,
            state=DEFAULT_INITIAL_STATE,
            session=SessionSnapshot(tenant_id=tenant_id),
        )


@dataclass(frozen=True, slots=True)
class FlowResult:
    """Resultado tipado de connect/regenerate/confirm/disconnect."""

    ok: bool
    state: LifecycleState
    reason: FlowReason | None = None
    message: str | None = None

    @property
    def reauth_required(self) -> bool:
        """Sinaliza ao host que o login do próprio usuário deve ser invalidado."""
        return self.reason == FlowReason.REAUTH_REQUIRED

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "state": self.state.value,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "reauth_required": self.reauth_required,
        }


@dataclass(frozen=True, slots=True)
class StateChange:
    """Evento entregue aos observadores (onStateChange)."""

    tenant_id: str
    previous: LifecycleState
    current: LifecycleState
    session: SessionSnapshot
    reason: FlowReason | None = None


@dataclass(frozen=True, slots=True)
class BackendAck:
    """Resposta de initialize/terminate."""

    accepted: bool
    message: str | None = None


@dataclass(frozen=True, slots=True)
class MessageRequest:
    """Pedido de envio. Criado por chamada, consumido na hora, nunca guardado."""

    recipient: str
    body: str
    attachment_ref: str | None = None
    mode: DispatchMode = DispatchMode.SINGLE


@dataclass(frozen=True, slots=True)
class SendReceipt:
    """Resposta do backend para /message/send."""

    accepted: bool
    manual: bool = False
    deep_link: str | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Resultado de um envio individual.

    accepted + manual=False: despachado pela sessão ativa.
    accepted + manual=True: o usuário conclui o envio pelo deep_link.
    accepted=False: o envio falhou; deep_link (se houver) é a rota manual.
    """

    recipient: str
    accepted: bool
    manual: bool
    deep_link: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient": self.recipient,
            "accepted": self.accepted,
            "manual": self.manual,
            "deep_link": self.deep_link,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class RecipientError:
    """Falha de um destinatário no envio em massa."""

    index: int
    recipient: str
    error: str


@dataclass(frozen=True, slots=True)
class BulkResult:
    """Resultado de um envio em massa. successful + failed == total."""

    total: int
    successful: int
    failed: int
    per_recipient_errors: tuple[RecipientError, ...] = ()
    results: tuple[DispatchResult, ...] = ()

    def __post_init__(self) -> None:
        if self.successful + self.failed != self.total:
            raise ValueError(
                f"BulkResult inconsistente: {self.successful} + {self.failed} != {self.total}"
            )

    @classmethod
    def from_results(cls, results: list[DispatchResult]) -> BulkResult:
        """Agrega resultados individuais, na ordem dos pedidos."""
        errors = tuple(
            RecipientError(index=i, recipient=r.recipient, error=r.error or "not_accepted")
            for i, r in enumerate(results)
            if not r.accepted
        )
        successful = sum(1 for r in results if r.accepted)
        return cls(
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
            per_recipient_errors=errors,
            results=tuple(results),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "per_recipient_errors": [
                {"index": e.index, "recipient": e.recipient, "error": e.error}
                for e in self.per_recipient_errors
            ],
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True, slots=True)
class InvoicePayload:
    """Conteúdo produzido pelo provedor de fatura (fora deste subsistema)."""

    body: str
    attachment_ref: str | None = None
