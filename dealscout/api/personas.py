"""
Personas API routes.
"""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.config import settings
from dealscout.database import get_session
from dealscout.services.persona_service import PersonaService
from dealscout.services.export_service import ExportService
from dealscout.schemas.persona import PersonaCreate, PersonaUpdate, PersonaResponse
from dealscout.schemas.export import TrainingExport
from dealscout.schemas.common import error_responses

router = APIRouter(prefix=f"{settings.API_PREFIX}/personas", tags=["personas"])


@router.post("/", response_model=PersonaResponse, status_code=201)
async def create_persona(
    persona_data: PersonaCreate,
    session: AsyncSession = Depends(get_session)
):
    """Create a new persona."""
    persona_service = PersonaService(session)
    return await persona_service.create(persona_data)


@router.get("/")
async def list_personas(session: AsyncSession = Depends(get_session)):
    """List personas in creation order."""
    persona_service = PersonaService(session)
    personas = await persona_service.list()
    return {"items": personas, "total": len(personas)}


@router.get("/active", response_model=Optional[PersonaResponse])
async def get_active_persona(session: AsyncSession = Depends(get_session)):
    """Get the active persona (null when none is active)."""
    persona_service = PersonaService(session)
    return await persona_service.get_active()


@router.post("/defaults", status_code=201)
async def initialize_default_personas(session: AsyncSession = Depends(get_session)):
    """Append the starter persona catalog."""
    persona_service = PersonaService(session)
    personas = await persona_service.initialize_defaults()
    return {"items": personas, "total": len(personas)}


@router.get("/{persona_id}", response_model=PersonaResponse, responses=error_responses(404))
async def get_persona(
    persona_id: uuid.UUID,
    session: AsyncSession = Depends(get_session)
):
    """Get a persona by ID."""
    persona_service = PersonaService(session)
    return await persona_service.get(persona_id)


@router.patch("/{persona_id}", response_model=PersonaResponse, responses=error_responses(404))
async def update_persona(
    persona_id: uuid.UUID,
    persona_data: PersonaUpdate,
    session: AsyncSession = Depends(get_session)
):
    """Update a persona."""
    persona_service = PersonaService(session)
    return await persona_service.update(persona_id, persona_data)


@router.delete("/{persona_id}", status_code=204, responses=error_responses(404))
async def delete_persona(
    persona_id: uuid.UUID,
    session: AsyncSession = Depends(get_session)
):
    """Delete a persona with its feedback and learned weights."""
    persona_service = PersonaService(session)
    await persona_service.delete(persona_id)


@router.post("/{persona_id}/activate", response_model=PersonaResponse, responses=error_responses(404))
async def activate_persona(
    persona_id: uuid.UUID,
    session: AsyncSession = Depends(get_session)
):
    """Make this persona the active one."""
    persona_service = PersonaService(session)
    return await persona_service.set_active(persona_id)


@router.get("/{persona_id}/export", response_model=TrainingExport, responses=error_responses(404))
async def export_persona(
    persona_id: uuid.UUID,
    session: AsyncSession = Depends(get_session)
):
    """Export the persona's feedback and learned weights."""
    export_service = ExportService(session)
    return await export_service.export(persona_id)
