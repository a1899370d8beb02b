# phishsim/utils.py

from datetime import datetime

import pytz
from email_validator import validate_email as _check_email, EmailNotValidError


def validate_email(email: str) -> bool:
    """Syntax-only email check (no DNS lookups)."""
    if not email:
        return False
    try:
        _check_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every stored datetime uses."""
    return datetime.now(pytz.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(pytz.utc).replace(tzinfo=None)


def anonymize_email(email: str) -> str:
    """Return partially masked email address for log lines."""
    if "@" not in email:
        return email
    user, domain = email.rsplit("@", 1)
    return user[:1] + "***@" + domain
