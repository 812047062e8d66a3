"""
Persona schemas.
"""
import uuid
from typing import Optional, Dict, List, Literal
from datetime import datetime
from pydantic import BaseModel, Field


class PersonaCriteria(BaseModel):
    """Highlight lists and base weights used for scoring."""
    positive_highlights: List[str] = []
    negative_highlights: List[str] = []
    red_flags: List[str] = []
    weights: Dict[str, float] = {}


class BulkActionSettings(BaseModel):
    """Settings for bulk auto-processing runs."""
    max_candidates_per_run: int = Field(default=20, ge=1)
    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    default_action: Literal["like", "stage_only"] = "stage_only"
    create_lists_automatically: bool = True


class PersonaCreate(BaseModel):
    """Create a persona."""
    name: str
    description: Optional[str] = None
    criteria: PersonaCriteria = PersonaCriteria()
    bulk_settings: BulkActionSettings = BulkActionSettings()

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Stealth Founder Hunter",
                "description": "Exceptional founders at the earliest stages",
                "criteria": {
                    "positive_highlights": ["serial_founder", "prior_exit", "yc_alumni"],
                    "negative_highlights": ["career_gap"],
                    "red_flags": ["no_experience"],
                    "weights": {"serial_founder": 0.9, "prior_exit": 0.85}
                },
                "bulk_settings": {
                    "max_candidates_per_run": 20,
                    "confidence_threshold": 0.6,
                    "default_action": "stage_only"
                }
            }
        }


class PersonaCriteriaUpdate(BaseModel):
    """Partial criteria update."""
    positive_highlights: Optional[List[str]] = None
    negative_highlights: Optional[List[str]] = None
    red_flags: Optional[List[str]] = None
    weights: Optional[Dict[str, float]] = None


class BulkActionSettingsUpdate(BaseModel):
    """Partial bulk settings update."""
    max_candidates_per_run: Optional[int] = Field(default=None, ge=1)
    confidence_threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    default_action: Optional[Literal["like", "stage_only"]] = None
    create_lists_automatically: Optional[bool] = None


class PersonaUpdate(BaseModel):
    """Update a persona. Activation goes through set_active."""
    name: Optional[str] = None
    description: Optional[str] = None
    criteria: Optional[PersonaCriteriaUpdate] = None
    bulk_settings: Optional[BulkActionSettingsUpdate] = None


class PersonaResponse(BaseModel):
    """Persona response."""
    id: uuid.UUID
    name: str
    description: Optional[str]
    criteria: PersonaCriteria
    bulk_settings: BulkActionSettings
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
