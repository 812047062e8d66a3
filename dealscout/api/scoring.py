"""
Scoring API routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.config import settings
from dealscout.database import get_session
from dealscout.services.scoring_service import ScoringService
from dealscout.schemas.scoring import (
    ScoreRequest, ScoreResult, AutoProcessRequest, AutoProcessResult
)
from dealscout.schemas.common import error_responses

router = APIRouter(prefix=f"{settings.API_PREFIX}/scoring", tags=["scoring"])


@router.post("/score", response_model=ScoreResult, responses=error_responses(404))
async def score_candidate(
    request: ScoreRequest,
    session: AsyncSession = Depends(get_session)
):
    """
    Score candidate attributes.
    Without persona_id the active persona is used; with no active persona
    the neutral result is returned with status "no_persona".
    """
    scoring_service = ScoringService(session)
    if request.persona_id:
        return await scoring_service.score_by_id(request.persona_id, request.attributes)
    return await scoring_service.score_active(request.attributes)


@router.post("/auto-process", response_model=AutoProcessResult, responses=error_responses(409))
async def auto_process(
    request: AutoProcessRequest,
    session: AsyncSession = Depends(get_session)
):
    """Score a batch with the active persona and bucket the results."""
    scoring_service = ScoringService(session)
    return await scoring_service.auto_process(
        request.candidates,
        like_threshold=request.like_threshold,
        dislike_threshold=request.dislike_threshold,
    )
