# Pydantic request & response models: private channel payloads and the
# management API. Everything is camelCase on the wire.

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from phishsim.models import CampaignStatus
from phishsim.templates import TemplateCategory


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Private channel ---

SEND_PHISHING_EMAIL = "send_phishing_email"
HEALTH_CHECK = "health_check"


class ChannelMessage(BaseModel):
    pattern: str
    data: dict = Field(default_factory=dict)


class SendRequest(WireModel):
    recipient_email: EmailStr
    email_content: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    attempt_id: str = Field(min_length=1)


class ErrorDetail(WireModel):
    code: str
    message: str
    details: Optional[Any] = None


class SendResult(WireModel):
    success: bool
    message: str
    sent_at: Optional[datetime] = None
    error: Optional[ErrorDetail] = None


class HealthStatus(WireModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime
    email_service_ready: bool


# --- Management API ---

class CampaignCreate(WireModel):
    recipient_email: str
    subject: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email_content: Optional[str] = None
    template_id: Optional[str] = None


class CampaignSummary(WireModel):
    """List projection: no content bodies."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    recipient_email: str
    subject: str
    status: CampaignStatus
    created_at: datetime
    updated_at: datetime
    sent_at: Optional[datetime] = None
    clicked_at: Optional[datetime] = None


class CampaignRead(CampaignSummary):
    owner_id: str
    email_content: str
    template_id: Optional[str] = None
    failure_reason: Optional[str] = None


class TemplateRead(WireModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    subject: str
    content: str
    description: str
    category: TemplateCategory


class ErrorResponse(WireModel):
    success: bool = False
    code: str
    message: str
    path: str
    timestamp: datetime
    errors: Optional[List[str]] = None
    campaign: Optional[CampaignRead] = None
