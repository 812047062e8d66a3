"""
Feedback and learned weight schemas.
"""
import uuid
from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel


class FeedbackCreate(BaseModel):
    """Like or dislike an entity for a persona."""
    persona_id: Optional[uuid.UUID] = None  # None means the active persona
    entity_id: str
    entity_type: Literal["person", "company"] = "person"
    action: Literal["like", "dislike"]
    attributes: List[str] = []
    note: Optional[str] = None
    ai_score: Optional[int] = None
    ai_recommendation: Optional[str] = None
    user_agreed: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "entity_id": "per_8f2c1a",
                "entity_type": "person",
                "action": "like",
                "attributes": ["serial_founder", "yc_alumni"],
                "ai_score": 84,
                "ai_recommendation": "STRONG_PASS",
                "user_agreed": True
            }
        }


class BulkFeedbackRequest(BaseModel):
    """Apply the same judgment to many entities."""
    persona_id: Optional[uuid.UUID] = None
    entity_ids: List[str]
    entity_type: Literal["person", "company"] = "person"
    attributes: List[str] = []


class FeedbackResult(BaseModel):
    """Result of recording feedback."""
    persona_id: uuid.UUID
    recorded: int
    attributes_updated: int


class FeedbackResponse(BaseModel):
    """Stored feedback record."""
    id: int
    persona_id: uuid.UUID
    entity_id: str
    entity_type: str
    action: str
    attributes: List[str]
    note: Optional[str]
    ai_score: Optional[int]
    ai_recommendation: Optional[str]
    user_agreed: bool
    synced: bool
    created_at: datetime

    class Config:
        from_attributes = True


class FeedbackStats(BaseModel):
    """Aggregate feedback counts for a persona."""
    total: int = 0
    likes: int = 0
    dislikes: int = 0
    agreement_rate: float = 0.0


class LearnedWeightResponse(BaseModel):
    """Learned weight entry."""
    attribute: str
    weight: float
    like_count: int
    dislike_count: int

    class Config:
        from_attributes = True


class SyncQueueItemResponse(BaseModel):
    """Pending upstream sync entry."""
    id: int
    entity_id: str
    entity_type: str
    action: str
    attempts: int
    last_error: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
