### phishsim/models.py
# SQLModel table for phishing campaigns plus the status state machine.
# Every status write in crud.py is checked against ALLOWED_TRANSITIONS.

import uuid
from enum import Enum
from typing import Optional

from pydantic import NaiveDatetime
from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field

from phishsim.utils import utcnow


class CampaignStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    CLICKED = "clicked"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    CampaignStatus.PENDING: frozenset({CampaignStatus.SENT, CampaignStatus.FAILED}),
    CampaignStatus.SENT: frozenset({CampaignStatus.CLICKED}),
    CampaignStatus.CLICKED: frozenset(),
    CampaignStatus.FAILED: frozenset(),
}


def can_transition(current: CampaignStatus, target: CampaignStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[CampaignStatus(current)]


def _new_id() -> str:
    return uuid.uuid4().hex


class Campaign(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    owner_id: str = Field(index=True)
    recipient_email: str
    subject: str
    email_content: str
    template_id: Optional[str] = None  # None for caller-supplied content
    status: CampaignStatus = Field(default=CampaignStatus.PENDING, index=True)
    failure_reason: Optional[str] = None
    # naive UTC throughout, see utils.utcnow
    created_at: NaiveDatetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    sent_at: Optional[NaiveDatetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    clicked_at: Optional[NaiveDatetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    updated_at: NaiveDatetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
