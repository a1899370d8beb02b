# phishsim/campaigns.py
"""
Campaign orchestration: creation, the send round-trip over the private
channel, dashboard listing and click recording.

Status changes after creation go through ``crud.conditional_update`` so the
PENDING → SENT/FAILED → CLICKED machine in models.py is enforced at the
store, not just checked here.
"""

import logging
from typing import List, Optional

from sqlmodel import Session

from phishsim import crud
from phishsim.channel import SimulationClient
from phishsim.errors import (
    ChannelError, InvalidState, NotFound, TransportError, ValidationError,
)
from phishsim.models import Campaign, CampaignStatus
from phishsim.schemas import CampaignSummary, SendRequest
from phishsim.templates import TemplateCatalog
from phishsim.utils import anonymize_email, as_naive_utc, utcnow, validate_email

logger = logging.getLogger(__name__)


def create_campaign(
    session: Session,
    catalog: TemplateCatalog,
    owner_id: str,
    recipient_email: str,
    subject: Optional[str] = None,
    email_content: Optional[str] = None,
    template_id: Optional[str] = None,
) -> Campaign:
    """Validate input, resolve subject/content, persist a PENDING campaign."""
    recipient_email = (recipient_email or "").strip()
    if not validate_email(recipient_email):
        raise ValidationError("Please provide a valid recipient email address")

    if template_id is not None:
        template = catalog.get_by_id(template_id)
        if template is None:
            raise ValidationError(f"Unknown email template: {template_id}")
    else:
        template = catalog.get_default()

    # a custom body must carry the tracking link before it can be stored
    content = email_content if email_content is not None else template.content
    check = catalog.validate(content)
    if not check.valid:
        raise ValidationError(f"Invalid email template: {', '.join(check.errors)}", errors=check.errors)

    c = crud.insert_campaign(session, Campaign(
        owner_id=owner_id,
        recipient_email=recipient_email,
        subject=subject or template.subject,
        email_content=content,
        template_id=template.id if email_content is None else None,
        status=CampaignStatus.PENDING,
    ))
    logger.info("Campaign %s created by %s for %s", c.id, owner_id, anonymize_email(recipient_email))
    return c


def get_campaign(session: Session, campaign_id: str, owner_id: str) -> Campaign:
    c = crud.get_campaign(session, campaign_id)
    # other owners' campaigns are indistinguishable from missing ones
    if c is None or c.owner_id != owner_id:
        raise NotFound("Phishing attempt not found")
    return c


def list_campaigns(session: Session, owner_id: str) -> List[CampaignSummary]:
    return [CampaignSummary.model_validate(c) for c in crud.get_campaigns_by_owner(session, owner_id)]


def send_campaign(session: Session, client: SimulationClient, campaign_id: str, owner_id: str) -> Campaign:
    """
    Dispatch a PENDING campaign exactly once.

    The outcome is always persisted: SENT on success, FAILED on a transport
    or channel failure (which is then re-raised with the FAILED campaign
    attached). There is no retry; a new campaign is needed to try again.
    """
    c = get_campaign(session, campaign_id, owner_id)
    if c.status != CampaignStatus.PENDING:
        raise InvalidState("Phishing attempt has already been processed")

    request = SendRequest(
        recipient_email=c.recipient_email,
        email_content=c.email_content,
        subject=c.subject,
        attempt_id=c.id,
    )
    try:
        result = client.send_phishing_email(request)
    except ChannelError as e:
        e.campaign = _mark_failed(session, c.id, f"{e.code}: {e.message}")
        raise

    if not result.success:
        code = result.error.code if result.error else TransportError.code
        reason = result.error.message if result.error else result.message
        failed = _mark_failed(session, c.id, f"{code}: {reason}")
        raise TransportError(f"Failed to send phishing email: {result.message or 'Unknown error'} ({reason})",
                             code=code, campaign=failed)

    sent_at = as_naive_utc(result.sent_at) if result.sent_at else utcnow()
    updated = crud.conditional_update(session, c.id, CampaignStatus.PENDING, {
        "status": CampaignStatus.SENT,
        "sent_at": sent_at,
    })
    if updated is None:
        raise InvalidState("Phishing attempt was processed concurrently")
    logger.info("Campaign %s transitioned pending -> sent", c.id)
    return updated


def _mark_failed(session: Session, campaign_id: str, reason: str) -> Optional[Campaign]:
    updated = crud.conditional_update(session, campaign_id, CampaignStatus.PENDING, {
        "status": CampaignStatus.FAILED,
        "failure_reason": reason,
    })
    if updated is None:
        logger.warning("Campaign %s left PENDING before it could be marked failed", campaign_id)
        return crud.get_campaign(session, campaign_id)
    logger.warning("Campaign %s transitioned pending -> failed (%s)", campaign_id, reason)
    return updated


def record_click(session: Session, campaign_id: str) -> Campaign:
    """
    Record a click on the tracking link. Idempotent: a second click returns
    the campaign unchanged, with the original clicked_at.
    """
    c = crud.get_campaign(session, campaign_id)
    if c is None:
        raise NotFound("Phishing attempt not found")
    if c.status == CampaignStatus.CLICKED:
        return c
    if c.status != CampaignStatus.SENT:
        raise InvalidState(f"Cannot record a click on a {c.status.value} attempt")

    updated = crud.conditional_update(session, campaign_id, CampaignStatus.SENT, {
        "status": CampaignStatus.CLICKED,
        "clicked_at": utcnow(),
    })
    if updated is None:
        # lost the race to a concurrent click
        c = crud.get_campaign(session, campaign_id)
        session.refresh(c)
        if c.status == CampaignStatus.CLICKED:
            return c
        raise InvalidState(f"Cannot record a click on a {c.status.value} attempt")

    logger.info("Campaign %s transitioned sent -> clicked", campaign_id)
    return updated
