"""Campaign store helpers for phishsim – SQLAlchemy 2.x compatible."""

from __future__ import annotations

from sqlmodel import Session, select
from sqlalchemy import update

from phishsim.models import Campaign, CampaignStatus, can_transition
from phishsim.utils import utcnow


# ───────────────────────── Campaign CRUD ───────────────────────────────
def insert_campaign(session: Session, c: Campaign) -> Campaign:
    session.add(c)
    session.commit()
    session.refresh(c)
    return c


def get_campaign(session: Session, cid: str) -> Campaign | None:
    return session.get(Campaign, cid)


def get_campaigns_by_owner(session: Session, owner_id: str) -> list[Campaign]:
    return session.exec(
        select(Campaign)
        .where(Campaign.owner_id == owner_id)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
    ).all()


def delete_campaigns(session: Session, owner_id: str | None = None) -> int:
    q = select(Campaign)
    if owner_id is not None:
        q = q.where(Campaign.owner_id == owner_id)
    rows = session.exec(q).all()
    for c in rows:
        session.delete(c)
    session.commit()
    return len(rows)


# ─────────────────────── Conditional status update ────────────────────
def conditional_update(
    session: Session,
    cid: str,
    expected_status: CampaignStatus,
    patch: dict,
) -> Campaign | None:
    """
    Apply *patch* only if the campaign is still in *expected_status*.

    Single UPDATE ... WHERE id = :cid AND status = :expected, so two writers
    racing on the same campaign cannot both win. Returns the refreshed row,
    or None when the id is unknown or the status has already moved on.
    """
    target = patch.get("status")
    if target is not None and not can_transition(expected_status, target):
        raise ValueError(f"illegal transition {expected_status.value} -> {CampaignStatus(target).value}")

    values = {**patch, "updated_at": utcnow()}
    result = session.exec(
        update(Campaign)
        .where(Campaign.id == cid, Campaign.status == expected_status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    if result.rowcount != 1:
        return None

    c = session.get(Campaign, cid)
    session.refresh(c)
    return c
