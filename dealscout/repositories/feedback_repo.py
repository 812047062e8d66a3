"""
Feedback repository.
"""
import uuid
from typing import Optional, List, Dict

from sqlmodel import select, update, delete
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func, case

from dealscout.models.feedback import Feedback, FeedbackAction
from dealscout.repositories.base import BaseRepository


class FeedbackRepository(BaseRepository[Feedback]):
    """Repository for Feedback operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Feedback, session)

    async def lock_for_entity(self, persona_id: uuid.UUID, entity_id: str) -> None:
        """
        Take the write lock for a persona's judgment on an entity (no commit).

        Issued as a no-op UPDATE: SQLite opens its write transaction on it and
        Postgres locks the row, so a concurrent re-judgment waits until this
        transaction ends and then reads the committed record.
        """
        table = Feedback.__table__
        await self.session.exec(
            table.update().where(
                table.c.persona_id == persona_id,
                table.c.entity_id == entity_id
            ).values(entity_id=table.c.entity_id)
        )

    async def get_for_entity(self, persona_id: uuid.UUID, entity_id: str) -> Optional[Feedback]:
        """Get the judgment a persona holds on an entity."""
        query = select(Feedback).where(
            Feedback.persona_id == persona_id,
            Feedback.entity_id == entity_id
        ).with_for_update().execution_options(populate_existing=True)
        result = await self.session.exec(query)
        return result.first()

    async def list_by_persona(self, persona_id: uuid.UUID) -> List[Feedback]:
        """List a persona's feedback in recording order."""
        query = select(Feedback).where(Feedback.persona_id == persona_id).order_by(Feedback.id)
        result = await self.session.exec(query)
        return list(result.all())

    async def stats(self, persona_id: uuid.UUID) -> Dict[str, int]:
        """Aggregate counts for a persona."""
        query = select(
            func.count(Feedback.id),
            func.sum(case((Feedback.action == FeedbackAction.LIKE, 1), else_=0)),
            func.sum(case((Feedback.action == FeedbackAction.DISLIKE, 1), else_=0)),
            func.sum(case((Feedback.user_agreed == True, 1), else_=0)),  # noqa: E712
        ).where(Feedback.persona_id == persona_id)
        result = await self.session.exec(query)
        total, likes, dislikes, agreed = result.one()
        return {
            "total": total or 0,
            "likes": likes or 0,
            "dislikes": dislikes or 0,
            "agreed": agreed or 0,
        }

    async def mark_synced(self, entity_id: str) -> None:
        """Flag every judgment on an entity as delivered upstream (no commit)."""
        await self.session.exec(
            update(Feedback).where(Feedback.entity_id == entity_id).values(synced=True)
        )

    async def delete_by_persona(self, persona_id: uuid.UUID) -> None:
        """Remove a persona's feedback (no commit)."""
        await self.session.exec(delete(Feedback).where(Feedback.persona_id == persona_id))
