"""Checklist service: one onboarding questionnaire per user, upsert semantics.

Every submission overwrites the whole row; fields the caller leaves out go
back to their empty defaults. Saving the checklist completes the onboarding
phase.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.models.base import utcnow
from nextmove.models.checklist import CustomerChecklist
from nextmove.services import audit_service, progress_service

# field name -> factory for the value stored when the field is omitted
CHECKLIST_FIELDS = {
    "payment_option": str,
    "payment_method": lambda: None,
    "tax_id": str,
    "domain": str,
    "target_audience": lambda: None,
    "company_info": lambda: None,
    "target_group_gender": lambda: None,
    "target_group_age": lambda: None,
    "target_group_location": lambda: None,
    "target_group_interests": list,
    "unique_selling_point": lambda: None,
    "market_size": lambda: None,
    "web_design": dict,
    "market_research": dict,
    "legal_info": dict,
    "ideal_customer_profile": dict,
    "qualification_questions": dict,
}


async def get_checklist(db: AsyncSession, user_id: uuid.UUID) -> CustomerChecklist | None:
    result = await db.execute(
        select(CustomerChecklist).where(CustomerChecklist.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def upsert_checklist(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    fields: dict,
    ip_address: str | None = None,
) -> CustomerChecklist:
    """Insert or fully overwrite the user's checklist, then complete onboarding phase."""
    unknown = set(fields) - set(CHECKLIST_FIELDS)
    if unknown:
        raise ValueError(f"Unknown checklist fields: {sorted(unknown)}")

    checklist = await get_checklist(db, user_id)
    created = checklist is None
    if created:
        checklist = CustomerChecklist(user_id=user_id)
        db.add(checklist)

    for name, default in CHECKLIST_FIELDS.items():
        value = fields.get(name)
        setattr(checklist, name, default() if value is None else value)
    checklist.submitted_at = utcnow()
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=user_id,
        event_type="checklist.submitted",
        entity_type="CustomerChecklist",
        entity_id=checklist.id,
        action="create" if created else "update",
        ip_address=ip_address,
    )

    await progress_service.mark_onboarding_phase(db, user_id=user_id, ip_address=ip_address)
    return checklist


async def set_logo_url(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    logo_url: str,
) -> CustomerChecklist:
    """Store the customer's logo in web_design, creating an empty checklist if needed.

    Does not count as a checklist submission.
    """
    checklist = await get_checklist(db, user_id)
    if checklist is None:
        checklist = CustomerChecklist(user_id=user_id)
        for name, default in CHECKLIST_FIELDS.items():
            setattr(checklist, name, default())
        db.add(checklist)

    checklist.web_design = {**(checklist.web_design or {}), "logoUrl": logo_url}
    await db.flush()
    return checklist


def compact(checklist: CustomerChecklist | None) -> dict | None:
    """Checklist as a dict with empty answers dropped (admin tracking view)."""
    if checklist is None:
        return None
    data = {"id": str(checklist.id), "updated_at": checklist.updated_at}
    for name in CHECKLIST_FIELDS:
        value = getattr(checklist, name)
        if value in ("", None, {}, []):
            continue
        data[name] = value
    return data
