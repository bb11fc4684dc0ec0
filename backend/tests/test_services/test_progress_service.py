import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nextmove.core.auth import create_admin, register_user
from nextmove.models.audit import AuditLogEvent
from nextmove.models.tutorial import Tutorial, TutorialProgress
from nextmove.models.user import User
from nextmove.services import checklist_service, phase_tracker, progress_service


async def _customer(db: AsyncSession, email: str = "progress@example.com") -> User:
    return await register_user(
        db,
        email=email,
        password="Pass12345!",
        first_name="Max",
        last_name="Mustermann",
        company_name="Muster GmbH",
    )


async def _admin(db: AsyncSession) -> User:
    return await create_admin(db, email="admin@example.com", password="AdminPass123!")


def _assert_consistent(user: User) -> None:
    assert user.completed_phases == phase_tracker.completed_through(user.completed_phases)
    assert (user.current_phase, user.progress) == phase_tracker.derive_state(
        user.completed_phases
    )


@pytest.mark.asyncio
async def test_new_customer_starts_at_zero(db_session: AsyncSession):
    user = await _customer(db_session)
    view = progress_service.progress_view(user)
    assert view["current_phase"] == "onboarding"
    assert view["completed_phases"] == []
    assert view["progress"] == 0
    assert not any(step["completed"] for step in view["roadmap"])


@pytest.mark.asyncio
async def test_mark_onboarding_phase_moves_to_twenty(db_session: AsyncSession):
    user = await _customer(db_session)
    await progress_service.mark_onboarding_phase(db_session, user_id=user.id)

    assert user.completed_phases == ["onboarding"]
    assert user.progress == 20
    _assert_consistent(user)


@pytest.mark.asyncio
async def test_mark_onboarding_phase_is_idempotent(db_session: AsyncSession):
    user = await _customer(db_session)
    await progress_service.mark_onboarding_phase(db_session, user_id=user.id)
    await progress_service.mark_onboarding_phase(db_session, user_id=user.id)

    assert user.completed_phases == ["onboarding"]
    result = await db_session.execute(
        select(AuditLogEvent).where(AuditLogEvent.event_type == "progress.phase_completed")
    )
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_mark_onboarding_phase_unknown_user(db_session: AsyncSession):
    assert await progress_service.mark_onboarding_phase(db_session, user_id=uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_set_phase_marks_everything_up_to_target(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)

    await progress_service.set_phase(
        db_session, user_id=user.id, phase="ads", actor_id=admin.id
    )
    assert user.completed_phases == ["onboarding", "landingpage", "ads"]
    assert user.current_phase == "ads"
    assert user.progress == 60
    _assert_consistent(user)


@pytest.mark.asyncio
async def test_set_phase_backwards_overwrites_completed(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)

    await progress_service.set_phase(db_session, user_id=user.id, phase="webinar", actor_id=admin.id)
    await progress_service.set_phase(db_session, user_id=user.id, phase="landingpage", actor_id=admin.id)

    assert user.completed_phases == ["onboarding", "landingpage"]
    assert user.progress == 40


@pytest.mark.asyncio
async def test_set_phase_accepts_any_case(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    await progress_service.set_phase(db_session, user_id=user.id, phase="WhatsApp", actor_id=admin.id)
    assert user.current_phase == "whatsapp"
    assert user.progress == 80


@pytest.mark.asyncio
async def test_set_phase_rejects_unknown_phase(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    with pytest.raises(ValueError, match="Invalid phase"):
        await progress_service.set_phase(
            db_session, user_id=user.id, phase="launch", actor_id=admin.id
        )
    assert user.progress == 0


@pytest.mark.asyncio
async def test_set_phase_marks_matching_tutorial_watched(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    tutorial = Tutorial(
        title="Ads Basics", description="", video_url="https://v/ads", category="ads"
    )
    db_session.add(tutorial)
    await db_session.flush()

    await progress_service.set_phase(db_session, user_id=user.id, phase="ads", actor_id=admin.id)

    result = await db_session.execute(
        select(TutorialProgress).where(
            TutorialProgress.user_id == user.id,
            TutorialProgress.tutorial_id == tutorial.id,
        )
    )
    assert result.scalar_one().completed is True


@pytest.mark.asyncio
async def test_advance_walks_the_whole_order(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    await progress_service.mark_onboarding_phase(db_session, user_id=user.id)

    seen = []
    for _ in range(4):
        await progress_service.advance_phase(db_session, user_id=user.id, actor_id=admin.id)
        seen.append((user.current_phase, user.progress))
        _assert_consistent(user)

    assert seen == [("landingpage", 40), ("ads", 60), ("whatsapp", 80), ("webinar", 100)]


@pytest.mark.asyncio
async def test_advance_at_last_phase_is_noop(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    await progress_service.set_phase(db_session, user_id=user.id, phase="webinar", actor_id=admin.id)

    await progress_service.advance_phase(db_session, user_id=user.id, actor_id=admin.id)
    assert user.current_phase == "webinar"
    assert user.completed_phases == phase_tracker.PHASE_ORDER


@pytest.mark.asyncio
async def test_rollback_steps_back_one_phase(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    await progress_service.set_phase(db_session, user_id=user.id, phase="whatsapp", actor_id=admin.id)

    await progress_service.rollback_phase(db_session, user_id=user.id, actor_id=admin.id)
    assert user.current_phase == "ads"
    assert user.completed_phases == ["onboarding", "landingpage", "ads"]
    assert user.progress == 60


@pytest.mark.asyncio
async def test_rollback_at_first_phase_is_noop(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)

    await progress_service.rollback_phase(db_session, user_id=user.id, actor_id=admin.id)
    assert user.current_phase == "onboarding"
    assert user.completed_phases == []
    assert user.progress == 0


@pytest.mark.asyncio
async def test_phase_changes_are_audited(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    await progress_service.set_phase(db_session, user_id=user.id, phase="ads", actor_id=admin.id)
    await progress_service.rollback_phase(db_session, user_id=user.id, actor_id=admin.id)

    result = await db_session.execute(
        select(AuditLogEvent)
        .where(AuditLogEvent.entity_id == user.id, AuditLogEvent.event_type.startswith("progress."))
        .order_by(AuditLogEvent.timestamp.asc())
    )
    events = result.scalars().all()
    assert [e.event_type for e in events] == ["progress.phase_set", "progress.phase_rolled_back"]
    assert events[0].user_id == admin.id
    assert events[0].detail["to_phase"] == "ads"
    assert events[1].detail["to_phase"] == "landingpage"


@pytest.mark.asyncio
async def test_corrupt_stored_state_is_normalized_on_next_write(db_session: AsyncSession):
    admin = await _admin(db_session)
    user = await _customer(db_session)
    user.completed_phases = ["Onboarding", "ads"]
    user.current_phase = "Complete"
    user.progress = 77
    await db_session.flush()

    view = progress_service.progress_view(user)
    assert view["current_phase"] == "onboarding"
    assert view["progress"] == 20

    await progress_service.advance_phase(db_session, user_id=user.id, actor_id=admin.id)
    assert user.completed_phases == ["onboarding", "landingpage"]
    _assert_consistent(user)


@pytest.mark.asyncio
async def test_complete_onboarding_requires_checklist(db_session: AsyncSession):
    user = await _customer(db_session)
    with pytest.raises(ValueError, match="checklist"):
        await progress_service.complete_onboarding(db_session, user_id=user.id)
    assert user.onboarding_completed is False


@pytest.mark.asyncio
async def test_complete_onboarding_after_checklist(db_session: AsyncSession):
    user = await _customer(db_session)
    await checklist_service.upsert_checklist(
        db_session,
        user_id=user.id,
        fields={"payment_option": "monthly", "tax_id": "DE1", "domain": "x.de"},
    )

    await progress_service.complete_onboarding(db_session, user_id=user.id)
    assert user.onboarding_completed is True
    assert user.completed_phases == ["onboarding"]
    assert user.progress == 20
