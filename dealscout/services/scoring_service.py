"""
Scoring service - scores candidates against a persona and its learned weights.
"""
import logging
import uuid
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.core.exceptions import NotFoundError, NoActivePersonaError
from dealscout.models.feedback import FeedbackAction
from dealscout.models.persona import Persona
from dealscout.repositories.persona_repo import PersonaRepository
from dealscout.repositories.weight_repo import WeightRepository
from dealscout.config import settings
from dealscout.schemas.persona import BulkActionSettings
from dealscout.schemas.scoring import (
    Candidate, ScoreResult, ScoredCandidate, AutoProcessResult
)
from dealscout.services.scoring_engine import (
    score_attributes, no_persona_result, matched_attributes, round_half_up
)
from dealscout.services.feedback_service import FeedbackService

logger = logging.getLogger(__name__)


class ScoringService:
    """Service for scoring operations. Scoring itself never writes."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.persona_repo = PersonaRepository(session)
        self.weight_repo = WeightRepository(session)

    async def score(self, persona: Optional[Persona], attributes: List[str]) -> ScoreResult:
        """Score attributes against a persona. No persona yields the sentinel result."""
        if persona is None:
            return no_persona_result()
        learned = await self.weight_repo.as_map(persona.id)
        result = score_attributes(persona.criteria or {}, attributes, learned)
        result.persona_id = persona.id
        return result

    async def score_by_id(self, persona_id: uuid.UUID, attributes: List[str]) -> ScoreResult:
        persona = await self.persona_repo.get(persona_id)
        if not persona:
            raise NotFoundError("Persona", str(persona_id))
        return await self.score(persona, attributes)

    async def score_active(self, attributes: List[str]) -> ScoreResult:
        persona = await self.persona_repo.get_active()
        if persona is None:
            logger.warning("Scoring requested with no active persona")
        return await self.score(persona, attributes)

    async def auto_process(
        self,
        candidates: List[Candidate],
        like_threshold: Optional[int] = None,
        dislike_threshold: Optional[int] = None
    ) -> AutoProcessResult:
        """
        Bulk-score candidates with the active persona and bucket them.

        Candidates at or above the like threshold are auto-likes, those at
        or below the dislike threshold are auto-dislikes, the rest need
        review. Judgments are only written when the persona's default
        action is "like"; "stage_only" just returns the buckets.
        """
        persona = await self.persona_repo.get_active()
        if persona is None:
            raise NoActivePersonaError()

        bulk_settings = BulkActionSettings(**(persona.bulk_settings or {}))
        if like_threshold is None:
            like_threshold = round_half_up(bulk_settings.confidence_threshold * 100)
        if dislike_threshold is None:
            dislike_threshold = settings.AUTO_DISLIKE_THRESHOLD

        batch = candidates[:bulk_settings.max_candidates_per_run]
        if len(candidates) > len(batch):
            logger.warning(
                f"Auto-process capped at {len(batch)} of {len(candidates)} candidates "
                f"for persona '{persona.name}'"
            )

        learned = await self.weight_repo.as_map(persona.id)
        result = AutoProcessResult(persona_id=persona.id, total=len(batch), recorded=False)
        decisions = []

        for candidate in batch:
            scored = score_attributes(persona.criteria or {}, candidate.attributes, learned)
            entry = ScoredCandidate(
                entity_id=candidate.entity_id,
                name=candidate.name,
                score=scored.score,
                recommendation=scored.recommendation,
            )
            if scored.score >= like_threshold:
                result.auto_liked.append(entry)
                decisions.append((candidate, FeedbackAction.LIKE, scored))
            elif scored.score <= dislike_threshold:
                result.auto_disliked.append(entry)
                decisions.append((candidate, FeedbackAction.DISLIKE, scored))
            else:
                result.needs_review.append(entry)

        if bulk_settings.default_action == "like" and decisions:
            feedback_service = FeedbackService(self.session)
            for candidate, action, _ in decisions:
                feedback_service.validate_judgment(candidate.entity_id, candidate.entity_type, action)
            try:
                for candidate, action, scored in decisions:
                    await feedback_service.record_feedback(
                        persona_id=persona.id,
                        entity_id=candidate.entity_id,
                        entity_type=candidate.entity_type,
                        action=action,
                        attributes=matched_attributes(scored.matched),
                        ai_score=scored.score,
                        ai_recommendation=scored.recommendation.value,
                        user_agreed=True,
                        commit=False,
                    )
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            result.recorded = True

        logger.info(
            f"Auto-processed {result.total} candidates for '{persona.name}': "
            f"{len(result.auto_liked)} liked, {len(result.auto_disliked)} disliked, "
            f"{len(result.needs_review)} for review"
        )
        return result
