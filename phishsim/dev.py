# phishsim/dev.py

import os
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from faker import Faker

from phishsim import campaigns, crud
from phishsim.auth import issue_owner_token
from phishsim.config import settings
from phishsim.database import get_session
from phishsim.deps import get_catalog
from phishsim.templates import TemplateCatalog

router = APIRouter(prefix="/dev", tags=["dev"])


def dev_only():
    """Raise error if not in DEV_MODE (for development safety)."""
    if not settings.DEV_MODE:
        raise HTTPException(status_code=403, detail="Not allowed outside DEV_MODE")


# --- Owner tokens for local testing ---
@router.post("/owner-token")
def owner_token(owner_id: str):
    """
    Issue a bearer token for *owner_id*, standing in for the real auth service.
    Only allowed in DEV_MODE.
    """
    dev_only()
    return {"owner_id": owner_id, "token": issue_owner_token(owner_id)}


# --- Bulk insert dummy/test data ---
@router.post("/generate-campaigns")
def generate_campaigns(
    owner_id: str,
    n: int = 10,
    session: Session = Depends(get_session),
    catalog: TemplateCatalog = Depends(get_catalog),
):
    """
    Add N PENDING campaigns with fake recipients, cycling through the catalog.
    Only allowed in DEV_MODE.
    """
    dev_only()
    fake = Faker()
    templates = catalog.list_all()
    created = [
        campaigns.create_campaign(
            session, catalog, owner_id,
            recipient_email=fake.unique.email(),
            template_id=templates[i % len(templates)].id,
        )
        for i in range(n)
    ]
    return {"added": len(created)}


# --- Purge ---
@router.post("/reset-campaigns", status_code=status.HTTP_200_OK)
def reset_campaigns(owner_id: Optional[str] = None, session: Session = Depends(get_session)):
    """
    Danger: deletes campaigns (all of them, or one owner's).
    Only allowed in DEV_MODE.
    """
    dev_only()
    deleted = crud.delete_campaigns(session, owner_id)
    return {"message": "campaigns deleted", "deleted": deleted}


# --- Toggle logging level ---
@router.post("/log-level")
def set_log_level(level: str):
    """
    Set Python logger level for backend (DEBUG, ERROR, etc).
    Only allowed in DEV_MODE.
    """
    dev_only()
    logger = logging.getLogger()
    allowed = ["DEBUG", "ERROR", "INFO", "WARNING", "CRITICAL"]
    if level.upper() not in allowed:
        raise HTTPException(status_code=400, detail="Invalid log level.")
    logger.setLevel(level.upper())
    return {"message": f"Log level set to {level.upper()}"}


# --- Error log file ---
@router.get("/error-log")
def get_error_log():
    dev_only()
    if not os.path.exists(settings.ERROR_LOG_PATH):
        return {"log": ""}
    with open(settings.ERROR_LOG_PATH) as f:
        return {"log": f.read()}


@router.post("/clear-error-log")
def clear_error_log():
    dev_only()
    open(settings.ERROR_LOG_PATH, "w").close()
    return {"message": "Error log cleared"}
