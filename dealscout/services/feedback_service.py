"""
Feedback service - like/dislike memory and learned attribute weights.
"""
import logging
import uuid
from collections import Counter
from typing import Optional, List, Dict, Any

from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.config import settings
from dealscout.core.exceptions import NotFoundError, ValidationError, NoActivePersonaError
from dealscout.core.timeutils import utc_now
from dealscout.models.feedback import Feedback, FeedbackAction, EntityType, SyncQueueItem
from dealscout.models.persona import Persona
from dealscout.models.weight import LearnedWeight
from dealscout.repositories.feedback_repo import FeedbackRepository
from dealscout.repositories.persona_repo import PersonaRepository
from dealscout.repositories.sync_repo import SyncQueueRepository
from dealscout.repositories.weight_repo import WeightRepository
from dealscout.schemas.feedback import FeedbackCreate, FeedbackResult, FeedbackStats
from dealscout.services.scoring_engine import normalize_attribute

logger = logging.getLogger(__name__)


class FeedbackService:
    """Service for feedback and learned weight operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.persona_repo = PersonaRepository(session)
        self.feedback_repo = FeedbackRepository(session)
        self.weight_repo = WeightRepository(session)
        self.sync_repo = SyncQueueRepository(session)

    async def get_persona(self, persona_id: Optional[uuid.UUID]) -> Persona:
        """Look up a persona, falling back to the active one when no ID is given."""
        if persona_id is None:
            persona = await self.persona_repo.get_active()
            if not persona:
                raise NoActivePersonaError()
            return persona
        persona = await self.persona_repo.get(persona_id)
        if not persona:
            raise NotFoundError("Persona", str(persona_id))
        return persona

    @staticmethod
    def _normalize_attributes(attributes: List[Any]) -> List[str]:
        normalized = []
        for attribute in attributes or []:
            if not isinstance(attribute, str) or not attribute.strip():
                raise ValidationError("Attributes must be non-empty strings", field="attributes")
            normalized.append(normalize_attribute(attribute))
        return normalized

    @staticmethod
    def validate_judgment(entity_id: str, entity_type: str, action: str) -> None:
        """Reject a judgment before anything is written."""
        if not entity_id or not str(entity_id).strip():
            raise ValidationError("Entity id must not be empty", field="entity_id")
        if entity_type not in EntityType.ALL:
            raise ValidationError(f"Unknown entity type '{entity_type}'", field="entity_type")
        if action not in FeedbackAction.ALL:
            raise ValidationError(f"Unknown action '{action}'", field="action")

    async def _apply(self, persona_id: uuid.UUID, action: str, attributes: List[str], revert: bool = False) -> None:
        for attribute, occurrences in Counter(attributes).items():
            likes = occurrences if action == FeedbackAction.LIKE else 0
            dislikes = occurrences if action == FeedbackAction.DISLIKE else 0
            if revert:
                await self.weight_repo.revert(persona_id, attribute, likes, dislikes)
            else:
                await self.weight_repo.apply(persona_id, attribute, likes, dislikes)

    async def record_feedback(
        self,
        persona_id: Optional[uuid.UUID],
        entity_id: str,
        entity_type: str,
        action: str,
        attributes: List[str],
        ai_score: Optional[int] = None,
        ai_recommendation: Optional[str] = None,
        user_agreed: bool = False,
        note: Optional[str] = None,
        commit: bool = True
    ) -> int:
        """
        Record a like/dislike and fold it into the persona's learned weights.

        Re-judging an entity replaces the earlier record and takes back the
        earlier record's weight contributions first. The record, the weight
        changes and the sync entry commit together. With ``commit=False``
        they stay in the caller's transaction; any failure rolls the whole
        transaction back.

        Returns:
            Number of attribute occurrences applied.
        """
        self.validate_judgment(entity_id, entity_type, action)
        normalized = self._normalize_attributes(attributes)
        persona = await self.get_persona(persona_id)

        try:
            await self.feedback_repo.lock_for_entity(persona.id, entity_id)
            existing = await self.feedback_repo.get_for_entity(persona.id, entity_id)
            if existing:
                await self._apply(persona.id, existing.action, existing.attributes or [], revert=True)
                existing.entity_type = entity_type
                existing.action = action
                existing.attributes = normalized
                existing.ai_score = ai_score
                existing.ai_recommendation = ai_recommendation
                existing.user_agreed = user_agreed
                existing.note = note
                existing.synced = False
                existing.updated_at = utc_now()
                self.session.add(existing)
            else:
                await self.feedback_repo.create({
                    "persona_id": persona.id,
                    "entity_id": entity_id,
                    "entity_type": entity_type,
                    "action": action,
                    "attributes": normalized,
                    "ai_score": ai_score,
                    "ai_recommendation": ai_recommendation,
                    "user_agreed": user_agreed,
                    "note": note,
                }, commit=False)

            await self._apply(persona.id, action, normalized)
            await self.sync_repo.enqueue(entity_id, entity_type, action, commit=False)
            if commit:
                await self.session.commit()
            else:
                await self.session.flush()
        except Exception:
            await self.session.rollback()
            logger.error(f"Failed to record {action} for {entity_type} {entity_id}", exc_info=True)
            raise

        verb = "Replaced" if existing else "Recorded"
        logger.info(
            f"{verb} {action} on {entity_type} {entity_id} for persona '{persona.name}' "
            f"({len(normalized)} attributes)"
        )
        return len(normalized)

    async def record(self, feedback: FeedbackCreate) -> FeedbackResult:
        """Record feedback from a request payload."""
        persona = await self.get_persona(feedback.persona_id)
        applied = await self.record_feedback(
            persona_id=persona.id,
            entity_id=feedback.entity_id,
            entity_type=feedback.entity_type,
            action=feedback.action,
            attributes=feedback.attributes,
            ai_score=feedback.ai_score,
            ai_recommendation=feedback.ai_recommendation,
            user_agreed=feedback.user_agreed,
            note=feedback.note,
        )
        return FeedbackResult(persona_id=persona.id, recorded=1, attributes_updated=applied)

    async def bulk_record(
        self,
        persona_id: Optional[uuid.UUID],
        entity_ids: List[str],
        action: str,
        attributes: List[str],
        entity_type: str = EntityType.PERSON
    ) -> int:
        """
        Apply the same judgment to many entities in one transaction.
        Every entity is validated first; one bad entity records nothing.
        Returns the number recorded.
        """
        persona = await self.get_persona(persona_id)
        for entity_id in entity_ids:
            self.validate_judgment(entity_id, entity_type, action)
        self._normalize_attributes(attributes)

        try:
            for entity_id in entity_ids:
                await self.record_feedback(
                    persona.id, entity_id, entity_type, action, attributes, commit=False
                )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Bulk {action}: {len(entity_ids)} {entity_type} entities for persona '{persona.name}'")
        return len(entity_ids)

    async def list_feedback(self, persona_id: Optional[uuid.UUID]) -> List[Feedback]:
        persona = await self.get_persona(persona_id)
        return await self.feedback_repo.list_by_persona(persona.id)

    async def get_weight(self, persona_id: uuid.UUID, attribute: str) -> Optional[float]:
        """Learned weight for an attribute, or None when nothing was learned."""
        entry = await self.weight_repo.get_for_attribute(persona_id, normalize_attribute(attribute))
        return entry.weight if entry else None

    async def learned_weights(self, persona_id: uuid.UUID) -> Dict[str, float]:
        return await self.weight_repo.as_map(persona_id)

    async def top_weights(self, persona_id: Optional[uuid.UUID], limit: int = None) -> List[LearnedWeight]:
        """Strongest learned weights by magnitude."""
        persona = await self.get_persona(persona_id)
        return await self.weight_repo.top(persona.id, limit or settings.TOP_WEIGHTS_LIMIT)

    async def stats(self, persona_id: Optional[uuid.UUID]) -> FeedbackStats:
        """Feedback totals and how often the user agreed with the AI."""
        persona = await self.get_persona(persona_id)
        counts = await self.feedback_repo.stats(persona.id)
        total = counts["total"]
        agreement_rate = round(counts["agreed"] / total * 100, 1) if total else 0.0
        return FeedbackStats(
            total=total,
            likes=counts["likes"],
            dislikes=counts["dislikes"],
            agreement_rate=agreement_rate,
        )

    async def pending_sync(self) -> List[SyncQueueItem]:
        """Sync entries still under the attempt cap."""
        return await self.sync_repo.pending(settings.SYNC_MAX_ATTEMPTS)
