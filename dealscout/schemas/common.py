"""
Common schemas used across multiple endpoints.
"""
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str

    class Config:
        json_schema_extra = {"example": {"detail": "Persona with id '...' not found"}}


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"


def error_responses(*status_codes: int) -> dict:
    """OpenAPI ``responses`` entries for the domain errors a route can return."""
    return {code: {"model": ErrorResponse} for code in status_codes}
