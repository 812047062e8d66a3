import json
import uuid

import pytest

from dealscout.core.exceptions import NotFoundError
from dealscout.services.export_service import ExportService
from dealscout.services.feedback_service import FeedbackService
from dealscout.services.persona_service import PersonaService
from dealscout.schemas.persona import PersonaCreate


@pytest.mark.asyncio
async def test_export_format(session, persona):
    feedback = FeedbackService(session)
    await feedback.record_feedback(
        persona.id, "per_1", "person", "like", ["serial_founder", "yc_alumni"],
        ai_score=87, user_agreed=True,
    )
    await feedback.record_feedback(persona.id, "per_2", "person", "dislike", ["yc_alumni"])

    export = await ExportService(session).export(persona.id)
    data = json.loads(export.model_dump_json())

    assert list(data.keys()) == [
        "persona_id", "persona_name", "exported_at", "feedback_count",
        "weights_count", "preference_pairs", "learned_weights",
    ]
    assert data["persona_id"] == str(persona.id)
    assert data["persona_name"] == "Founder Hunter"
    assert data["feedback_count"] == 2
    assert data["weights_count"] == 2
    assert data["preference_pairs"][0] == {
        "entity_id": "per_1",
        "action": "like",
        "attributes": ["serial_founder", "yc_alumni"],
        "ai_score": 87,
        "user_agreed": True,
    }
    assert data["preference_pairs"][1]["ai_score"] is None
    assert data["learned_weights"] == [
        {"attribute": "serial_founder", "weight": 1.0, "like_count": 1, "dislike_count": 0},
        {"attribute": "yc_alumni", "weight": 0.0, "like_count": 1, "dislike_count": 1},
    ]


@pytest.mark.asyncio
async def test_export_empty_persona(session, persona):
    export = await ExportService(session).export(persona.id)

    assert export.feedback_count == 0
    assert export.weights_count == 0
    assert export.preference_pairs == []
    assert export.learned_weights == []


@pytest.mark.asyncio
async def test_export_unknown_persona(session):
    with pytest.raises(NotFoundError):
        await ExportService(session).export(uuid.uuid4())


@pytest.mark.asyncio
async def test_export_all_skips_personas_without_data(session, persona):
    personas = PersonaService(session)
    await personas.create(PersonaCreate(name="Empty"))
    other = await personas.create(PersonaCreate(name="Operator Scout"))

    feedback = FeedbackService(session)
    await feedback.record_feedback(persona.id, "per_1", "person", "like", ["serial_founder"])
    await feedback.record_feedback(other.id, "co_1", "company", "dislike", ["single_product"])

    combined = await ExportService(session).export_all()
    data = json.loads(combined.model_dump_json())

    assert list(data.keys()) == ["exported_at", "personas"]
    assert [p["persona_name"] for p in data["personas"]] == ["Founder Hunter", "Operator Scout"]
    assert data["personas"][1]["preference_pairs"][0]["entity_id"] == "co_1"
    assert list(data["personas"][0].keys()) == [
        "persona_id", "persona_name", "exported_at", "feedback_count",
        "weights_count", "preference_pairs", "learned_weights",
    ]


@pytest.mark.asyncio
async def test_dpo_examples(session, persona):
    feedback = FeedbackService(session)
    await feedback.record_feedback(
        persona.id, "per_1", "person", "like", ["serial_founder", "yc_alumni"],
        ai_score=87, user_agreed=True, note="Great team",
    )
    await feedback.record_feedback(persona.id, "per_2", "person", "dislike", ["no_experience"])

    examples = await ExportService(session).dpo_examples(persona.id)

    liked, disliked = examples
    assert liked.prompt == "Evaluate this candidate for Founder Hunter:\nAttributes: serial_founder, yc_alumni"
    assert liked.chosen == "This candidate is a good fit. Key signals: serial_founder, yc_alumni. Great team"
    assert liked.rejected == "This candidate is not a good fit."
    assert (liked.persona_id, liked.entity_id, liked.ai_score, liked.user_agreed) == (
        persona.id, "per_1", 87, True
    )
    assert disliked.chosen == "This candidate is not a good fit. Concerns: no_experience."
    assert disliked.rejected == "This candidate is a good fit."


@pytest.mark.asyncio
async def test_dpo_examples_cover_all_personas(session, persona):
    other = await PersonaService(session).create(PersonaCreate(name="Operator Scout"))
    feedback = FeedbackService(session)
    await feedback.record_feedback(persona.id, "per_1", "person", "like", ["serial_founder"])
    await feedback.record_feedback(other.id, "per_1", "person", "dislike", ["serial_founder"])

    examples = await ExportService(session).dpo_examples()

    assert [(e.persona_id, e.entity_id) for e in examples] == [(persona.id, "per_1"), (other.id, "per_1")]


@pytest.mark.asyncio
async def test_dpo_examples_unknown_persona(session):
    with pytest.raises(NotFoundError):
        await ExportService(session).dpo_examples(uuid.uuid4())
