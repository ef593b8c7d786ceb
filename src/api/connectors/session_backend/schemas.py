"""Schemas pydantic das respostas do backend de sessão.

O backend usa camelCase e alguns nomes alternativos (status/state,
qrCode/qr, success/accepted); os aliases normalizam ambos.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.sessions.models import BackendState


class AckResponse(BaseModel):
    """Resposta de initialize/terminate."""

    model_config = ConfigDict(extra="ignore")

    accepted: bool = Field(validation_alias=AliasChoices("accepted", "success"))
    message: str | None = None


class StatusResponse(BaseModel):
    """Resposta de session/status."""

    model_config = ConfigDict(extra="ignore")

    state: BackendState = Field(validation_alias=AliasChoices("state", "status"))
    qr: str | None = Field(default=None, validation_alias=AliasChoices("qr", "qrCode"))
    phone_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("phoneNumber", "phone_number"),
    )
    profile_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("profileName", "profile_name"),
    )


class SendResponse(BaseModel):
    """Resposta de message/send."""

    model_config = ConfigDict(extra="ignore")

    accepted: bool = Field(validation_alias=AliasChoices("accepted", "success"))
    manual: bool = False
    deep_link: str | None = Field(
        default=None,
        validation_alias=AliasChoices("deepLink", "deep_link"),
    )
    error: str | None = None


class BulkErrorItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    recipient: str = Field(validation_alias=AliasChoices("phoneNumber", "recipient"))
    error: str = "not_accepted"


class BulkResponse(BaseModel):
    """Resposta de message/send-bulk."""

    model_config = ConfigDict(extra="ignore")

    total: int
    successful: int
    failed: int
    errors: list[BulkErrorItem] = Field(default_factory=list)
