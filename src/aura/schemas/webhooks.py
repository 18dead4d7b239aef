"""Inbound e-mail webhook payloads (Resend ``email.received`` events)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from aura.core.enums import IngestionStatus


class InboundEmailData(BaseModel):
    """Event metadata; the body has to be fetched separately by ``email_id``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email_id: str = Field(..., min_length=1)
    sender: str | None = Field(default=None, alias="from")
    to: list[str] = Field(default_factory=list)
    subject: str = ""
    created_at: datetime | None = None

    @field_validator("to", mode="before")
    @classmethod
    def coerce_recipients(cls, v):
        if isinstance(v, str):
            return [v]
        return v or []


class InboundEmailEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., min_length=1)
    created_at: datetime | None = None
    data: InboundEmailData


class WebhookAck(BaseModel):
    """Acknowledgement for every business outcome."""

    status: IngestionStatus
    transaction_id: UUID | None = None
