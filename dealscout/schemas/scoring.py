"""
Scoring schemas.
"""
import uuid
from enum import Enum
from typing import Optional, List, Literal
from pydantic import BaseModel


class Recommendation(str, Enum):
    STRONG_PASS = "STRONG_PASS"
    SOFT_PASS = "SOFT_PASS"
    BORDERLINE = "BORDERLINE"
    PASS = "PASS"


class ScoreStatus(str, Enum):
    OK = "ok"
    NO_PERSONA = "no_persona"


class ScoreRequest(BaseModel):
    """Score a candidate's attributes."""
    persona_id: Optional[uuid.UUID] = None  # None means the active persona
    attributes: List[str] = []

    class Config:
        json_schema_extra = {
            "example": {"attributes": ["serial_founder", "prior_exit", "stanford_alumni"]}
        }


class ScoreResult(BaseModel):
    """Score, recommendation and the ordered match trace."""
    score: int
    recommendation: Recommendation
    matched: List[str] = []
    status: ScoreStatus = ScoreStatus.OK
    persona_id: Optional[uuid.UUID] = None


class Candidate(BaseModel):
    """Candidate entity submitted for bulk processing."""
    entity_id: str
    entity_type: Literal["person", "company"] = "person"
    name: Optional[str] = None
    attributes: List[str] = []


class AutoProcessRequest(BaseModel):
    """Bulk auto-process candidates against the active persona."""
    candidates: List[Candidate]
    like_threshold: Optional[int] = None  # defaults to confidence_threshold * 100
    dislike_threshold: Optional[int] = None


class ScoredCandidate(BaseModel):
    entity_id: str
    name: Optional[str] = None
    score: int
    recommendation: Recommendation


class AutoProcessResult(BaseModel):
    """Buckets produced by an auto-process run."""
    persona_id: uuid.UUID
    total: int
    recorded: bool
    auto_liked: List[ScoredCandidate] = []
    auto_disliked: List[ScoredCandidate] = []
    needs_review: List[ScoredCandidate] = []
