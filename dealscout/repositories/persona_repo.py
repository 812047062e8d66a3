"""
Persona repository.
"""
import uuid
from typing import Optional, List

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from dealscout.models.persona import Persona
from dealscout.repositories.base import BaseRepository


class PersonaRepository(BaseRepository[Persona]):
    """Repository for Persona operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Persona, session)

    async def create(self, obj_in: dict, commit: bool = True) -> Persona:
        """Create a persona at the end of the creation sequence."""
        result = await self.session.exec(select(func.coalesce(func.max(Persona.position), 0)))
        return await super().create({**obj_in, "position": result.one() + 1}, commit=commit)

    async def list_in_order(self) -> List[Persona]:
        """
        Personas in creation order.
        position is the sequence; created_at only separates equal positions
        written by concurrent creators.
        """
        query = select(Persona).order_by(Persona.position, Persona.created_at)
        result = await self.session.exec(query)
        return list(result.all())

    async def get_active(self) -> Optional[Persona]:
        """Get the active persona, if any."""
        query = select(Persona).where(Persona.is_active == True)  # noqa: E712
        result = await self.session.exec(query)
        return result.first()

    async def get_by_name(self, name: str) -> Optional[Persona]:
        """Get the oldest persona with this name (case-insensitive)."""
        query = select(Persona).where(
            func.lower(Persona.name) == name.strip().lower()
        ).order_by(Persona.position, Persona.created_at)
        result = await self.session.exec(query)
        return result.first()

    async def set_active(self, persona_id: uuid.UUID) -> None:
        """Clear every active flag and set it on one persona, in one transaction."""
        await self.session.exec(
            update(Persona).where(Persona.is_active == True).values(is_active=False)  # noqa: E712
        )
        await self.session.exec(
            update(Persona).where(Persona.id == persona_id).values(is_active=True)
        )
        await self.session.commit()
