"""
Feedback models - like/dislike judgments and the upstream sync queue.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, DateTime, UniqueConstraint

from dealscout.core.timeutils import utc_now


class Feedback(SQLModel, table=True):
    """
    One judgment per (persona, entity).
    Re-judging an entity replaces the previous record.
    """
    __table_args__ = (UniqueConstraint("persona_id", "entity_id", name="uq_feedback_persona_entity"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    persona_id: uuid.UUID = Field(foreign_key="persona.id", index=True)

    # Judged entity
    entity_id: str = Field(index=True)
    entity_type: str  # person, company
    action: str = Field(index=True)  # like, dislike

    # Datapoints the judgment was based on (normalized)
    attributes: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    note: Optional[str] = None

    # AI proposal at the time of the judgment
    ai_score: Optional[int] = None
    ai_recommendation: Optional[str] = None
    user_agreed: bool = Field(default=False)

    # Upstream status
    synced: bool = Field(default=False, index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class SyncQueueItem(SQLModel, table=True):
    """
    Pending write to the external entity-status API.
    Consumed by an external synchronizer; entries past the attempt cap stay
    in the table but drop out of the pending view.
    """
    __tablename__ = "sync_queue"

    id: Optional[int] = Field(default=None, primary_key=True)
    entity_id: str = Field(index=True)
    entity_type: str  # person, company
    action: str  # like, dislike

    attempts: int = Field(default=0)
    last_error: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


# Value constants for consistency
class FeedbackAction:
    LIKE = "like"
    DISLIKE = "dislike"

    ALL = (LIKE, DISLIKE)


class EntityType:
    PERSON = "person"
    COMPANY = "company"

    ALL = (PERSON, COMPANY)
