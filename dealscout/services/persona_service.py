"""
Persona service - persona registry and the active-persona flag.
"""
import copy
import logging
import uuid
from typing import Optional, List, Union

from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.core.exceptions import NotFoundError, ValidationError
from dealscout.repositories.persona_repo import PersonaRepository
from dealscout.repositories.feedback_repo import FeedbackRepository
from dealscout.repositories.weight_repo import WeightRepository
from dealscout.models.persona import Persona, DEFAULT_PERSONAS
from dealscout.schemas.persona import (
    PersonaCreate, PersonaUpdate, PersonaCriteria, BulkActionSettings
)

logger = logging.getLogger(__name__)


class PersonaService:
    """Service for persona operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.persona_repo = PersonaRepository(session)
        self.feedback_repo = FeedbackRepository(session)
        self.weight_repo = WeightRepository(session)

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        if name is None or not name.strip():
            raise ValidationError("Persona name must not be empty", field="name")
        return name.strip()

    async def create(self, persona_data: PersonaCreate) -> Persona:
        """Create a new (inactive) persona."""
        data = persona_data.model_dump()
        data["name"] = self._clean_name(persona_data.name)
        data["is_active"] = False
        persona = await self.persona_repo.create(data)
        logger.info(f"Created persona '{persona.name}' ({persona.id})")
        return persona

    async def get(self, persona_id: uuid.UUID) -> Persona:
        """Get a persona by ID."""
        persona = await self.persona_repo.get(persona_id)
        if not persona:
            raise NotFoundError("Persona", str(persona_id))
        return persona

    async def resolve(self, ref: Union[str, uuid.UUID]) -> Persona:
        """Find a persona by ID or by (case-insensitive) name."""
        if isinstance(ref, uuid.UUID):
            return await self.get(ref)
        try:
            return await self.get(uuid.UUID(ref))
        except ValueError:
            pass
        persona = await self.persona_repo.get_by_name(ref)
        if not persona:
            raise NotFoundError("Persona", ref)
        return persona

    async def list(self) -> List[Persona]:
        """List personas in creation order."""
        return await self.persona_repo.list_in_order()

    async def update(self, persona_id: uuid.UUID, persona_data: PersonaUpdate) -> Persona:
        """
        Update a persona.
        Criteria and bulk settings are merged field by field; the active
        flag is never touched here.
        """
        persona = await self.get(persona_id)

        update_data = persona_data.model_dump(exclude_unset=True)
        if "name" in update_data:
            update_data["name"] = self._clean_name(update_data["name"])

        if update_data.get("criteria") is not None:
            criteria = copy.deepcopy(persona.criteria or {})
            criteria.update({k: v for k, v in update_data["criteria"].items() if v is not None})
            update_data["criteria"] = PersonaCriteria(**criteria).model_dump()

        if update_data.get("bulk_settings") is not None:
            bulk_settings = copy.deepcopy(persona.bulk_settings or {})
            bulk_settings.update({k: v for k, v in update_data["bulk_settings"].items() if v is not None})
            update_data["bulk_settings"] = BulkActionSettings(**bulk_settings).model_dump()

        update_data.pop("is_active", None)
        updated = await self.persona_repo.update(persona.id, update_data)
        logger.info(f"Updated persona '{updated.name}' ({updated.id})")
        return updated

    async def delete(self, persona_id: uuid.UUID) -> bool:
        """Delete a persona along with its feedback and learned weights."""
        persona = await self.get(persona_id)
        try:
            await self.feedback_repo.delete_by_persona(persona.id)
            await self.weight_repo.delete_by_persona(persona.id)
            await self.persona_repo.delete(persona.id, commit=False)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        if persona.is_active:
            logger.warning(f"Deleted active persona '{persona.name}', no persona is active now")
        else:
            logger.info(f"Deleted persona '{persona.name}' ({persona.id})")
        return True

    async def set_active(self, persona_id: uuid.UUID) -> Persona:
        """Make one persona the only active persona."""
        persona = await self.get(persona_id)
        try:
            await self.persona_repo.set_active(persona.id)
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(persona)
        logger.info(f"Switched active persona to '{persona.name}'")
        return persona

    async def get_active(self) -> Optional[Persona]:
        """Get the active persona, if any."""
        return await self.persona_repo.get_active()

    async def initialize_defaults(self) -> List[Persona]:
        """
        Append the starter persona catalog.
        Calling this twice appends a second copy of every default.
        """
        created = []
        try:
            for entry in DEFAULT_PERSONAS:
                data = PersonaCreate(**copy.deepcopy(entry)).model_dump()
                data["is_active"] = False
                created.append(await self.persona_repo.create(data, commit=False))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        for persona in created:
            await self.session.refresh(persona)
        logger.info(f"Initialized {len(created)} default personas")
        return created
