"""
Training export schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class PreferencePair(BaseModel):
    entity_id: str
    action: str
    attributes: List[str]
    ai_score: Optional[int] = None
    user_agreed: bool = False


class ExportedWeight(BaseModel):
    attribute: str
    weight: float
    like_count: int
    dislike_count: int


class TrainingExport(BaseModel):
    """Read-only snapshot of a persona's feedback and learned weights."""
    persona_id: uuid.UUID
    persona_name: str
    exported_at: datetime
    feedback_count: int
    weights_count: int
    preference_pairs: List[PreferencePair]
    learned_weights: List[ExportedWeight]


class CombinedExport(BaseModel):
    """Training snapshots of every persona that has feedback or weights."""
    exported_at: datetime
    personas: List[TrainingExport]


class DpoExample(BaseModel):
    """One preference pair in the prompt/chosen/rejected layout used for DPO fine-tuning."""
    prompt: str
    chosen: str
    rejected: str
    persona_id: uuid.UUID
    entity_id: str
    ai_score: Optional[int] = None
    user_agreed: bool = False
