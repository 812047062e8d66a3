"""
Export service - training snapshots of persona preference memory.
"""
import logging
import uuid
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.core.exceptions import NotFoundError
from dealscout.core.timeutils import utc_now
from dealscout.models.feedback import Feedback, FeedbackAction
from dealscout.models.persona import Persona
from dealscout.repositories.persona_repo import PersonaRepository
from dealscout.repositories.feedback_repo import FeedbackRepository
from dealscout.repositories.weight_repo import WeightRepository
from dealscout.schemas.export import (
    TrainingExport, PreferencePair, ExportedWeight, CombinedExport, DpoExample
)

logger = logging.getLogger(__name__)

GOOD_FIT = "This candidate is a good fit."
POOR_FIT = "This candidate is not a good fit."


def to_dpo_example(persona: Persona, feedback: Feedback) -> DpoExample:
    """
    Turn one judgment into a DPO pair. The user's verdict (with the
    attributes and note behind it) is the chosen answer, the opposite
    verdict is the rejected one.
    """
    attributes = ", ".join(feedback.attributes or [])
    if feedback.action == FeedbackAction.LIKE:
        chosen = f"{GOOD_FIT} Key signals: {attributes}. {feedback.note or ''}"
        rejected = POOR_FIT
    else:
        chosen = f"{POOR_FIT} Concerns: {attributes}. {feedback.note or ''}"
        rejected = GOOD_FIT
    return DpoExample(
        prompt=f"Evaluate this candidate for {persona.name}:\nAttributes: {attributes}",
        chosen=chosen.strip(),
        rejected=rejected,
        persona_id=persona.id,
        entity_id=feedback.entity_id,
        ai_score=feedback.ai_score,
        user_agreed=feedback.user_agreed,
    )


class ExportService:
    """Read-only export of feedback and learned weights."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.persona_repo = PersonaRepository(session)
        self.feedback_repo = FeedbackRepository(session)
        self.weight_repo = WeightRepository(session)

    async def _get_persona(self, persona_id: uuid.UUID) -> Persona:
        persona = await self.persona_repo.get(persona_id)
        if not persona:
            raise NotFoundError("Persona", str(persona_id))
        return persona

    async def _snapshot(self, persona: Persona) -> TrainingExport:
        feedback = await self.feedback_repo.list_by_persona(persona.id)
        weights = await self.weight_repo.list_by_persona(persona.id)

        return TrainingExport(
            persona_id=persona.id,
            persona_name=persona.name,
            exported_at=utc_now(),
            feedback_count=len(feedback),
            weights_count=len(weights),
            preference_pairs=[
                PreferencePair(
                    entity_id=f.entity_id,
                    action=f.action,
                    attributes=f.attributes or [],
                    ai_score=f.ai_score,
                    user_agreed=f.user_agreed,
                )
                for f in feedback
            ],
            learned_weights=[
                ExportedWeight(
                    attribute=w.attribute,
                    weight=w.weight,
                    like_count=w.like_count,
                    dislike_count=w.dislike_count,
                )
                for w in weights
            ],
        )

    async def export(self, persona_id: uuid.UUID) -> TrainingExport:
        persona = await self._get_persona(persona_id)
        snapshot = await self._snapshot(persona)
        logger.info(f"Exporting {snapshot.feedback_count} feedback records for persona '{persona.name}'")
        return snapshot

    async def export_all(self) -> CombinedExport:
        """Snapshots of all personas in creation order, skipping personas with no data."""
        snapshots = []
        for persona in await self.persona_repo.list_in_order():
            snapshot = await self._snapshot(persona)
            if snapshot.feedback_count == 0 and snapshot.weights_count == 0:
                logger.debug(f"Nothing to export for persona '{persona.name}'")
                continue
            snapshots.append(snapshot)

        logger.info(
            f"Exporting {len(snapshots)} personas, "
            f"{sum(s.feedback_count for s in snapshots)} feedback records"
        )
        return CombinedExport(exported_at=utc_now(), personas=snapshots)

    async def dpo_examples(self, persona_id: Optional[uuid.UUID] = None) -> List[DpoExample]:
        """DPO pairs for one persona, or for every persona when no ID is given."""
        if persona_id is not None:
            personas = [await self._get_persona(persona_id)]
        else:
            personas = await self.persona_repo.list_in_order()

        examples = []
        for persona in personas:
            for feedback in await self.feedback_repo.list_by_persona(persona.id):
                examples.append(to_dpo_example(persona, feedback))
        logger.info(f"Built {len(examples)} DPO examples from {len(personas)} personas")
        return examples
