"""
Sync queue repository.
Entries are written with each feedback record and consumed by an external
synchronizer that pushes the entity status upstream.
"""
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.config import settings
from dealscout.models.feedback import SyncQueueItem
from dealscout.repositories.base import BaseRepository
from dealscout.repositories.feedback_repo import FeedbackRepository


class SyncQueueRepository(BaseRepository[SyncQueueItem]):
    """Repository for SyncQueueItem operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(SyncQueueItem, session)

    async def enqueue(self, entity_id: str, entity_type: str, action: str, commit: bool = True) -> SyncQueueItem:
        return await self.create({
            "entity_id": entity_id,
            "entity_type": entity_type,
            "action": action,
            "attempts": 0,
        }, commit=commit)

    async def pending(self, max_attempts: int = None) -> List[SyncQueueItem]:
        """Entries still eligible for delivery, oldest first."""
        cap = max_attempts if max_attempts is not None else settings.SYNC_MAX_ATTEMPTS
        query = select(SyncQueueItem).where(
            SyncQueueItem.attempts < cap
        ).order_by(SyncQueueItem.created_at, SyncQueueItem.id)
        result = await self.session.exec(query)
        return list(result.all())

    async def record_failure(self, item_id: int, error: str) -> SyncQueueItem:
        """Count a failed delivery attempt."""
        item = await self.get(item_id)
        if not item:
            return None
        item.attempts += 1
        item.last_error = error
        return await self._persist(item, commit=True)

    async def complete(self, item_id: int) -> bool:
        """Drop a delivered entry and mark the entity's feedback as synced."""
        item = await self.get(item_id)
        if not item:
            return False
        await FeedbackRepository(self.session).mark_synced(item.entity_id)
        await self.session.delete(item)
        await self.session.commit()
        return True
