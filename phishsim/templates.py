# phishsim/templates.py
# Built-in phishing email templates and the read-only catalog around them.

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

CLICK_LINK_PLACEHOLDER = "{{CLICK_LINK}}"
TIMESTAMP_PLACEHOLDER = "{{TIMESTAMP}}"
MAX_CONTENT_LENGTH = 50_000


class TemplateCategory(str, Enum):
    SECURITY = "security"
    SOCIAL = "social"
    URGENCY = "urgency"
    REWARD = "reward"
    CUSTOM = "custom"


@dataclass(frozen=True)
class EmailTemplate:
    id: str
    name: str
    subject: str
    content: str
    description: str
    category: TemplateCategory


@dataclass
class TemplateValidation:
    valid: bool
    errors: List[str] = field(default_factory=list)


def validate_content(content: str) -> TemplateValidation:
    """Check that *content* can carry a tracking link and fits in an email."""
    errors = []
    if CLICK_LINK_PLACEHOLDER not in content:
        errors.append(f"Template must include {CLICK_LINK_PLACEHOLDER} placeholder")
    if len(content) > MAX_CONTENT_LENGTH:
        errors.append(f"Template content too large (max {MAX_CONTENT_LENGTH} characters)")
    return TemplateValidation(valid=not errors, errors=errors)


class TemplateCatalog:
    """
    Immutable registry of email templates.

    Passed around explicitly (see deps.get_catalog) rather than read from a
    module global, so tests and deployments can swap in their own set.
    """

    def __init__(self, templates: Iterable[EmailTemplate], default_id: Optional[str] = None):
        self._templates = tuple(templates)
        if not self._templates:
            raise ValueError("catalog needs at least one template")

        self._by_id = {}
        for tpl in self._templates:
            if tpl.id in self._by_id:
                raise ValueError(f"duplicate template id: {tpl.id}")
            check = validate_content(tpl.content)
            if not check.valid:
                raise ValueError(f"template {tpl.id!r} is invalid: {', '.join(check.errors)}")
            self._by_id[tpl.id] = tpl

        if default_id is not None and default_id not in self._by_id:
            raise ValueError(f"unknown default template: {default_id}")
        self._default_id = default_id or self._templates[0].id

    def list_all(self) -> List[EmailTemplate]:
        return list(self._templates)

    def get_by_id(self, template_id: str) -> Optional[EmailTemplate]:
        return self._by_id.get(template_id)

    def get_default(self) -> EmailTemplate:
        return self._by_id[self._default_id]

    def validate(self, content: str) -> TemplateValidation:
        return validate_content(content)

    def __len__(self):
        return len(self._templates)


BUILTIN_TEMPLATES = (
    EmailTemplate(
        id="security-verification",
        name="Security Verification",
        subject="Urgent: Account Verification Required",
        description="Classic security alert requiring immediate action",
        category=TemplateCategory.SECURITY,
        content="""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #d32f2f;">Account Verification Required</h2>
        <p>Dear User,</p>
        <p>We've detected unusual activity on your account. Please verify your identity by clicking the link below:</p>
        <div style="text-align: center; margin: 20px 0;">
          <a href="{{CLICK_LINK}}" style="background-color: #1976d2; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px;">Verify Account</a>
        </div>
        <p>If you don't verify within 24 hours, your account will be suspended.</p>
        <p>Best regards,<br>Security Team</p>
      </div>
    """,
    ),
    EmailTemplate(
        id="password-reset",
        name="Password Reset Request",
        subject="Password Reset - Action Required",
        description="Password reset phishing attempt",
        category=TemplateCategory.SECURITY,
        content="""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #1976d2;">Password Reset Request</h2>
        <p>Hello,</p>
        <p>We received a request to reset your password. If this was you, please click the button below:</p>
        <div style="text-align: center; margin: 20px 0;">
          <a href="{{CLICK_LINK}}" style="background-color: #4caf50; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">Reset Password</a>
        </div>
        <p>This link will expire in 1 hour for security reasons.</p>
        <p>If you didn't request this, please ignore this email.</p>
        <p>Support Team</p>
      </div>
    """,
    ),
    EmailTemplate(
        id="social-linkedin",
        name="LinkedIn Connection",
        subject="You have a new connection request",
        description="Social engineering via fake LinkedIn notification",
        category=TemplateCategory.SOCIAL,
        content="""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <div style="background-color: #0077b5; padding: 20px; text-align: center;">
          <h1 style="color: white; margin: 0;">LinkedIn</h1>
        </div>
        <div style="padding: 20px;">
          <h2>You have a new connection request</h2>
          <p>Hi there,</p>
          <p>John Smith wants to connect with you on LinkedIn.</p>
          <div style="text-align: center; margin: 20px 0;">
            <a href="{{CLICK_LINK}}" style="background-color: #0077b5; color: white; padding: 10px 20px; text-decoration: none; border-radius: 5px;">View Profile</a>
          </div>
          <p>Best regards,<br>The LinkedIn Team</p>
        </div>
      </div>
    """,
    ),
    EmailTemplate(
        id="urgent-invoice",
        name="Urgent Invoice Payment",
        subject="URGENT: Invoice Payment Overdue",
        description="Urgent payment request to create panic",
        category=TemplateCategory.URGENCY,
        content="""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #f44336;">&#9888; URGENT: Payment Overdue</h2>
        <p>Dear Customer,</p>
        <p><strong>Invoice #INV-2024-001 is now 30 days overdue.</strong></p>
        <p>Amount due: <span style="color: #f44336; font-weight: bold;">$1,247.50</span></p>
        <p>To avoid additional fees and service suspension, please pay immediately:</p>
        <div style="text-align: center; margin: 20px 0;">
          <a href="{{CLICK_LINK}}" style="background-color: #f44336; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">PAY NOW</a>
        </div>
        <p>Failure to pay within 24 hours will result in additional charges.</p>
        <p>Billing Department</p>
      </div>
    """,
    ),
    EmailTemplate(
        id="reward-survey",
        name="Survey Reward",
        subject="Congratulations! You've won a $500 gift card",
        description="Fake reward to entice clicks",
        category=TemplateCategory.REWARD,
        content="""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <div style="background: linear-gradient(45deg, #ff9800, #ffeb3b); padding: 20px; text-align: center;">
          <h1 style="color: white; margin: 0;">CONGRATULATIONS!</h1>
        </div>
        <div style="padding: 20px;">
          <h2>You've won a $500 Amazon Gift Card!</h2>
          <p>You've been selected as our lucky winner!</p>
          <p>Complete a quick 2-minute survey to claim your prize:</p>
          <div style="text-align: center; margin: 20px 0;">
            <a href="{{CLICK_LINK}}" style="background-color: #ff9800; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-size: 18px;">CLAIM YOUR PRIZE</a>
          </div>
          <p style="color: #666; font-size: 12px;">Offer expires in 24 hours. Must be 18+ to participate.</p>
        </div>
      </div>
    """,
    ),
)

default_catalog = TemplateCatalog(BUILTIN_TEMPLATES, default_id="security-verification")
