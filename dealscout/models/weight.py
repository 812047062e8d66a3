"""
Learned weight model - per-persona attribute weights derived from feedback.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime, UniqueConstraint

from dealscout.core.timeutils import utc_now


class LearnedWeight(SQLModel, table=True):
    """
    Feedback-derived weight for one attribute of one persona.
    weight = (like_count - dislike_count) / (like_count + dislike_count)
    """
    __tablename__ = "learned_weight"
    __table_args__ = (UniqueConstraint("persona_id", "attribute", name="uq_weight_persona_attribute"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    persona_id: uuid.UUID = Field(foreign_key="persona.id", index=True)
    attribute: str = Field(index=True)

    weight: float = Field(default=0.0)
    like_count: int = Field(default=0)
    dislike_count: int = Field(default=0)

    last_updated: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
