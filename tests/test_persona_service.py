import uuid
from datetime import timedelta

import pytest

from dealscout.core.exceptions import NotFoundError, ValidationError
from dealscout.core.timeutils import utc_now
from dealscout.models import Persona, Feedback, SyncQueueItem, LearnedWeight
from dealscout.models.persona import DEFAULT_PERSONAS
from dealscout.schemas.persona import (
    PersonaCreate, PersonaUpdate, PersonaCriteriaUpdate, BulkActionSettingsUpdate
)
from dealscout.services.feedback_service import FeedbackService
from dealscout.services.persona_service import PersonaService


async def _active_count(service: PersonaService) -> int:
    return sum(1 for p in await service.list() if p.is_active)


@pytest.mark.asyncio
async def test_create_persona_is_inactive(session):
    service = PersonaService(session)
    persona = await service.create(PersonaCreate(name="  Seed Scout  "))

    assert persona.name == "Seed Scout"
    assert persona.is_active is False
    assert persona.bulk_settings["max_candidates_per_run"] == 20
    assert persona.bulk_settings["confidence_threshold"] == 0.5
    assert persona.bulk_settings["default_action"] == "stage_only"
    assert await service.get_active() is None


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   "])
async def test_create_rejects_blank_name(session, name):
    service = PersonaService(session)
    with pytest.raises(ValidationError):
        await service.create(PersonaCreate(name=name))
    assert await service.list() == []


@pytest.mark.asyncio
async def test_get_unknown_persona(session):
    with pytest.raises(NotFoundError):
        await PersonaService(session).get(uuid.uuid4())


@pytest.mark.asyncio
async def test_set_active_keeps_single_active(session):
    service = PersonaService(session)
    first = await service.create(PersonaCreate(name="First"))
    second = await service.create(PersonaCreate(name="Second"))

    await service.set_active(first.id)
    assert (await service.get_active()).id == first.id

    await service.set_active(second.id)
    assert (await service.get_active()).id == second.id
    assert await _active_count(service) == 1

    third = await service.create(PersonaCreate(name="Third"))
    assert third.is_active is False
    assert await _active_count(service) == 1


@pytest.mark.asyncio
async def test_set_active_unknown_keeps_current(session):
    service = PersonaService(session)
    persona = await service.create(PersonaCreate(name="Only"))
    await service.set_active(persona.id)

    with pytest.raises(NotFoundError):
        await service.set_active(uuid.uuid4())
    assert (await service.get_active()).id == persona.id


@pytest.mark.asyncio
async def test_update_merges_and_keeps_active_flag(session, persona):
    service = PersonaService(session)
    updated = await service.update(persona.id, PersonaUpdate(
        description="Updated",
        criteria=PersonaCriteriaUpdate(red_flags=["no_experience", "stealth_only"]),
        bulk_settings=BulkActionSettingsUpdate(confidence_threshold=0.8),
    ))

    assert updated.is_active is True
    assert updated.description == "Updated"
    assert updated.criteria["red_flags"] == ["no_experience", "stealth_only"]
    assert updated.criteria["positive_highlights"] == ["serial_founder", "prior_exit", "yc_alumni"]
    assert updated.criteria["weights"]["serial_founder"] == 0.9
    assert updated.bulk_settings["confidence_threshold"] == 0.8
    assert updated.bulk_settings["max_candidates_per_run"] == 20


@pytest.mark.asyncio
async def test_update_rejects_blank_name(session, persona):
    with pytest.raises(ValidationError):
        await PersonaService(session).update(persona.id, PersonaUpdate(name=" "))


@pytest.mark.asyncio
async def test_update_unknown_persona(session):
    with pytest.raises(NotFoundError):
        await PersonaService(session).update(uuid.uuid4(), PersonaUpdate(name="x"))


@pytest.mark.asyncio
async def test_delete_active_leaves_none_active(session, persona):
    service = PersonaService(session)
    await FeedbackService(session).record_feedback(
        persona.id, "per_1", "person", "like", ["serial_founder"]
    )

    assert await service.delete(persona.id) is True
    assert await service.get_active() is None
    assert await service.list() == []
    assert await FeedbackService(session).learned_weights(persona.id) == {}

    with pytest.raises(NotFoundError):
        await service.delete(persona.id)


@pytest.mark.asyncio
async def test_list_in_creation_order(session):
    service = PersonaService(session)
    for name in ("Alpha", "Bravo", "Charlie"):
        await service.create(PersonaCreate(name=name))

    assert [p.name for p in await service.list()] == ["Alpha", "Bravo", "Charlie"]


@pytest.mark.asyncio
async def test_initialize_defaults_appends_catalog(session):
    service = PersonaService(session)
    created = await service.initialize_defaults()

    assert [p.name for p in created] == [d["name"] for d in DEFAULT_PERSONAS]
    early = created[0]
    assert early.bulk_settings["confidence_threshold"] == 0.6
    assert early.criteria["weights"]["serial_founder"] == 0.95
    assert await service.get_active() is None


@pytest.mark.asyncio
async def test_initialize_defaults_twice_duplicates(session, persona):
    service = PersonaService(session)
    await service.initialize_defaults()
    await service.initialize_defaults()

    names = [p.name for p in await service.list()]
    assert len(names) == 1 + 2 * len(DEFAULT_PERSONAS)
    assert names.count("Private Equity") == 2
    assert (await service.get_active()).id == persona.id


@pytest.mark.asyncio
async def test_resolve_by_id_or_name(session, persona):
    service = PersonaService(session)

    assert (await service.resolve(str(persona.id))).id == persona.id
    assert (await service.resolve(persona.id)).id == persona.id
    assert (await service.resolve("founder hunter")).id == persona.id
    with pytest.raises(NotFoundError):
        await service.resolve("nobody")


@pytest.mark.asyncio
async def test_list_order_survives_clock_going_back(session):
    service = PersonaService(session)
    first = await service.create(PersonaCreate(name="First"))
    second = await service.create(PersonaCreate(name="Second"))
    third = await service.create(PersonaCreate(name="Third"))

    # later personas stamped earlier than the first one
    now = utc_now()
    second.created_at = now - timedelta(hours=2)
    third.created_at = now - timedelta(hours=1)
    session.add_all([second, third])
    await session.commit()

    assert [p.position for p in (first, second, third)] == [1, 2, 3]
    assert [p.name for p in await service.list()] == ["First", "Second", "Third"]


@pytest.mark.asyncio
async def test_initialize_defaults_continues_sequence(session, persona):
    created = await PersonaService(session).initialize_defaults()

    assert [p.position for p in created] == [2, 3, 4, 5]


def test_timestamps_are_timezone_aware():
    assert utc_now().utcoffset() == timedelta(0)
    columns = [
        Persona.__table__.c.created_at, Persona.__table__.c.updated_at,
        Feedback.__table__.c.created_at, Feedback.__table__.c.updated_at,
        SyncQueueItem.__table__.c.created_at, LearnedWeight.__table__.c.last_updated,
    ]
    assert all(column.type.timezone for column in columns)
