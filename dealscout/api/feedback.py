"""
Feedback API routes - likes, dislikes and learned weights.
"""
import uuid
from typing import Optional, List
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.config import settings
from dealscout.database import get_session
from dealscout.models.feedback import FeedbackAction
from dealscout.services.feedback_service import FeedbackService
from dealscout.schemas.feedback import (
    FeedbackCreate, BulkFeedbackRequest, FeedbackResult, FeedbackResponse,
    FeedbackStats, LearnedWeightResponse, SyncQueueItemResponse
)
from dealscout.schemas.common import error_responses

router = APIRouter(prefix=f"{settings.API_PREFIX}/feedback", tags=["feedback"])


@router.post("/", response_model=FeedbackResult, status_code=201, responses=error_responses(404, 409))
async def record_feedback(
    feedback: FeedbackCreate,
    session: AsyncSession = Depends(get_session)
):
    """Like or dislike an entity. Without persona_id the active persona is used."""
    feedback_service = FeedbackService(session)
    return await feedback_service.record(feedback)


async def _bulk(request: BulkFeedbackRequest, action: str, session: AsyncSession) -> FeedbackResult:
    feedback_service = FeedbackService(session)
    persona = await feedback_service.get_persona(request.persona_id)
    recorded = await feedback_service.bulk_record(
        persona.id, request.entity_ids, action, request.attributes, request.entity_type
    )
    return FeedbackResult(
        persona_id=persona.id,
        recorded=recorded,
        attributes_updated=recorded * len(request.attributes),
    )


@router.post("/bulk-like", response_model=FeedbackResult, status_code=201, responses=error_responses(404, 409))
async def bulk_like(
    request: BulkFeedbackRequest,
    session: AsyncSession = Depends(get_session)
):
    """Like many entities at once."""
    return await _bulk(request, FeedbackAction.LIKE, session)


@router.post("/bulk-dislike", response_model=FeedbackResult, status_code=201, responses=error_responses(404, 409))
async def bulk_dislike(
    request: BulkFeedbackRequest,
    session: AsyncSession = Depends(get_session)
):
    """Dislike many entities at once."""
    return await _bulk(request, FeedbackAction.DISLIKE, session)


@router.get("/", responses=error_responses(404, 409))
async def list_feedback(
    persona_id: Optional[uuid.UUID] = None,
    session: AsyncSession = Depends(get_session)
):
    """List feedback for a persona (default: active persona)."""
    feedback_service = FeedbackService(session)
    items = await feedback_service.list_feedback(persona_id)
    return {
        "items": [FeedbackResponse.model_validate(f) for f in items],
        "total": len(items)
    }


@router.get("/stats", response_model=FeedbackStats, responses=error_responses(404, 409))
async def feedback_stats(
    persona_id: Optional[uuid.UUID] = None,
    session: AsyncSession = Depends(get_session)
):
    """Feedback totals for a persona (default: active persona)."""
    feedback_service = FeedbackService(session)
    return await feedback_service.stats(persona_id)


@router.get("/weights", response_model=List[LearnedWeightResponse], responses=error_responses(404, 409))
async def top_weights(
    persona_id: Optional[uuid.UUID] = None,
    limit: int = Query(default=settings.TOP_WEIGHTS_LIMIT, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    """Strongest learned weights for a persona (default: active persona)."""
    feedback_service = FeedbackService(session)
    return await feedback_service.top_weights(persona_id, limit)


@router.get("/sync-queue", response_model=List[SyncQueueItemResponse])
async def sync_queue(session: AsyncSession = Depends(get_session)):
    """Entries waiting to be pushed upstream."""
    feedback_service = FeedbackService(session)
    return await feedback_service.pending_sync()
