# phishsim/dispatcher.py
# Simulation side of the private channel: turns a SendRequest into an email.
# Only {{CLICK_LINK}} / {{TIMESTAMP}} are substituted; any other text is sent as written.

import logging
import re
from datetime import datetime

import html2text
from pydantic import ValidationError as PydanticValidationError

from phishsim.config import settings
from phishsim.mailer import OutgoingMessage, SMTPTransport
from phishsim.schemas import (
    ErrorDetail, HealthStatus, SendRequest, SendResult,
    SEND_PHISHING_EMAIL, HEALTH_CHECK,
)
from phishsim.templates import CLICK_LINK_PLACEHOLDER, TIMESTAMP_PLACEHOLDER
from phishsim.utils import anonymize_email, utcnow

logger = logging.getLogger(__name__)

_PLACEHOLDERS = re.compile("|".join(map(re.escape, (CLICK_LINK_PLACEHOLDER, TIMESTAMP_PLACEHOLDER))))


def build_tracking_url(base_url: str, attempt_id: str) -> str:
    return f"{base_url.rstrip('/')}/{attempt_id}"


def render_content(content: str, click_url: str, timestamp: datetime = None) -> str:
    """
    Replace the click-link and timestamp placeholders, literally.
    Other {{...}} or {% ... %} text is not interpreted.
    """
    values = {
        CLICK_LINK_PLACEHOLDER: click_url,
        TIMESTAMP_PLACEHOLDER: (timestamp or utcnow()).strftime("%Y-%m-%d %H:%M:%S UTC"),
    }
    return _PLACEHOLDERS.sub(lambda m: values[m.group(0)], content)


_text_maker = html2text.HTML2Text()
_text_maker.body_width = 0
_text_maker.ignore_images = True
_text_maker.ignore_emphasis = True


def html_to_text(html: str) -> str:
    """Plain-text fallback: html2text, then collapse all whitespace runs."""
    return re.sub(r"\s+", " ", _text_maker.handle(html)).strip()


class SendDispatcher:
    def __init__(self, transport: SMTPTransport, tracking_base_url: str, sender: str):
        self.transport = transport
        self.tracking_base_url = tracking_base_url
        self.sender = sender

    @classmethod
    def from_settings(cls) -> "SendDispatcher":
        return cls(
            transport=SMTPTransport.from_settings(),
            tracking_base_url=settings.CLICK_TRACKING_BASE_URL,
            sender=settings.EMAIL_FROM,
        )

    def handle_send(self, request: SendRequest) -> SendResult:
        """Send one phishing email. Always returns a SendResult, never raises."""
        recipient = anonymize_email(request.recipient_email)
        logger.info("Sending phishing email for attempt %s to %s", request.attempt_id, recipient)
        try:
            click_url = build_tracking_url(self.tracking_base_url, request.attempt_id)
            html = render_content(request.email_content, click_url)
            delivery = self.transport.send(OutgoingMessage(
                sender=self.sender,
                to=request.recipient_email,
                subject=request.subject,
                html=html,
                text=html_to_text(html),
            ))
        except Exception as e:
            logger.exception("Unexpected error while sending attempt %s", request.attempt_id)
            return SendResult(
                success=False,
                message="Unexpected error occurred while processing email request",
                error=ErrorDetail(code="INTERNAL_ERROR", message=str(e) or type(e).__name__),
            )

        if not delivery.success:
            logger.warning("Attempt %s not delivered: %s", request.attempt_id, delivery.error_code)
            return SendResult(
                success=False,
                message="Failed to send phishing email",
                error=ErrorDetail(code=delivery.error_code or "SMTP_ERROR",
                                  message=delivery.error_message or "Unknown SMTP error"),
            )

        return SendResult(success=True, message="Phishing email sent successfully", sent_at=utcnow())

    def handle_health_check(self) -> HealthStatus:
        try:
            ready = self.transport.health_check()
        except Exception:
            logger.exception("Health check failed")
            return HealthStatus(status="unhealthy", timestamp=utcnow(), email_service_ready=False)
        return HealthStatus(
            status="healthy" if ready else "degraded",
            timestamp=utcnow(),
            email_service_ready=ready,
        )


class UnknownPattern(LookupError):
    pass


def dispatch_message(dispatcher: SendDispatcher, pattern: str, data: dict) -> dict:
    """
    Route one channel message to the dispatcher and return the wire reply.
    Shared by the simulation service's HTTP endpoint and the in-process channel client.
    """
    if pattern == SEND_PHISHING_EMAIL:
        try:
            request = SendRequest.model_validate(data or {})
        except PydanticValidationError as e:
            logger.warning("Rejected %s payload: %s", pattern, e.errors())
            return SendResult(
                success=False,
                message="Invalid send request payload",
                error=ErrorDetail(
                    code="INVALID_PAYLOAD",
                    message="; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()),
                ),
            ).to_wire()
        return dispatcher.handle_send(request).to_wire()

    if pattern == HEALTH_CHECK:
        logger.info("Received health check request")
        return dispatcher.handle_health_check().to_wire()

    raise UnknownPattern(pattern)
