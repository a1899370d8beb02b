import logging

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from phishsim import campaigns
from phishsim.config import settings
from phishsim.database import get_session
from phishsim.errors import PhishingError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/phishing/click/{attempt_id}")
def track_click(attempt_id: str, session: Session = Depends(get_session)):
    """
    Public: hit from the recipient's mail client, no auth.
    Always lands on the awareness page; tracking failures stay in the log.
    """
    try:
        campaigns.record_click(session, attempt_id)
    except PhishingError as e:
        logger.info("Click on %s not recorded: %s", attempt_id, e)

    return RedirectResponse(url=f"{settings.AWARENESS_PAGE_URL.rstrip('/')}/phished/{attempt_id}")
