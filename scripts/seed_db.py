# scripts/seed_db.py
# Seeds a demo owner with one campaign per built-in template, in every status.

import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlmodel import Session

from phishsim import campaigns, crud
from phishsim.auth import issue_owner_token
from phishsim.database import engine, init_db
from phishsim.models import CampaignStatus
from phishsim.templates import default_catalog
from phishsim.utils import utcnow

OWNER_ID = os.getenv("SEED_OWNER_ID", "demo-owner")

init_db()
with Session(engine) as session:
    recipients = ["alice@example.com", "bob@example.com", "carol@example.com",
                  "david@example.com", "eve@example.com"]
    created = [
        campaigns.create_campaign(session, default_catalog, OWNER_ID, recipient_email=r, template_id=t.id)
        for r, t in zip(recipients, default_catalog.list_all())
    ]

    # walk a few through the state machine without touching SMTP
    crud.conditional_update(session, created[0].id, CampaignStatus.PENDING,
                            {"status": CampaignStatus.SENT, "sent_at": utcnow()})
    crud.conditional_update(session, created[1].id, CampaignStatus.PENDING,
                            {"status": CampaignStatus.SENT, "sent_at": utcnow()})
    campaigns.record_click(session, created[1].id)
    crud.conditional_update(session, created[2].id, CampaignStatus.PENDING,
                            {"status": CampaignStatus.FAILED, "failure_reason": "ECONNECTION: seeded failure"})

    print(f"✅ Seeded {len(created)} campaigns for owner '{OWNER_ID}'.")
    print(f"Bearer token: {issue_owner_token(OWNER_ID)}")
