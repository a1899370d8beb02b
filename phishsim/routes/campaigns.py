from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from phishsim import campaigns
from phishsim.auth import get_current_owner
from phishsim.channel import SimulationClient
from phishsim.database import get_session
from phishsim.deps import get_catalog, get_simulation_client
from phishsim.schemas import CampaignCreate, CampaignRead, CampaignSummary, HealthStatus, TemplateRead
from phishsim.templates import TemplateCatalog

router = APIRouter(prefix="/phishing", tags=["phishing"])


@router.get("/templates", response_model=List[TemplateRead])
def list_templates(catalog: TemplateCatalog = Depends(get_catalog)):
    return [TemplateRead.model_validate(t) for t in catalog.list_all()]


@router.post("/attempts", status_code=201, response_model=CampaignRead)
def create_attempt(
    data: CampaignCreate,
    owner_id: str = Depends(get_current_owner),
    db: Session = Depends(get_session),
    catalog: TemplateCatalog = Depends(get_catalog),
):
    return campaigns.create_campaign(
        db, catalog, owner_id,
        recipient_email=data.recipient_email,
        subject=data.subject,
        email_content=data.email_content,
        template_id=data.template_id,
    )


@router.get("/attempts", response_model=List[CampaignSummary])
def list_attempts(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_session)):
    return campaigns.list_campaigns(db, owner_id)


@router.get("/attempts/{attempt_id}", response_model=CampaignRead)
def get_attempt(attempt_id: str, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_session)):
    return campaigns.get_campaign(db, attempt_id, owner_id)


@router.post("/attempts/{attempt_id}/send", response_model=CampaignRead)
def send_attempt(
    attempt_id: str,
    owner_id: str = Depends(get_current_owner),
    db: Session = Depends(get_session),
    client: SimulationClient = Depends(get_simulation_client),
):
    return campaigns.send_campaign(db, client, attempt_id, owner_id)


@router.get("/simulation/health", response_model=HealthStatus)
def simulation_health(
    owner_id: str = Depends(get_current_owner),
    client: SimulationClient = Depends(get_simulation_client),
):
    return client.health_check()
