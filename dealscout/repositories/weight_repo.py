"""
Learned weight repository.

Counter changes are issued as single SQL statements so that concurrent
writers never lose an increment.
"""
import uuid
from typing import Optional, List, Dict

from sqlmodel import select, update, delete
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import Float, func, case, cast
from sqlalchemy.dialects import postgresql, sqlite

from dealscout.core.exceptions import ConfigurationError
from dealscout.core.timeutils import utc_now
from dealscout.models.weight import LearnedWeight
from dealscout.repositories.base import BaseRepository

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class WeightRepository(BaseRepository[LearnedWeight]):
    """Repository for LearnedWeight operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(LearnedWeight, session)

    def _insert(self):
        dialect = self.session.bind.dialect.name
        try:
            return _UPSERT_DIALECTS[dialect](LearnedWeight)
        except KeyError:
            raise ConfigurationError(
                f"Database dialect '{dialect}' is not supported, use sqlite or postgresql"
            )

    async def apply(
        self,
        persona_id: uuid.UUID,
        attribute: str,
        likes: int = 0,
        dislikes: int = 0
    ) -> None:
        """
        Add like/dislike occurrences to an attribute and recompute its weight.
        Seeds the row on first mention. Does not commit.
        """
        table = LearnedWeight.__table__
        now = utc_now()
        stmt = self._insert().values(
            persona_id=persona_id,
            attribute=attribute,
            like_count=likes,
            dislike_count=dislikes,
            weight=(likes - dislikes) / (likes + dislikes),
            last_updated=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.persona_id, table.c.attribute],
            set_={
                "like_count": table.c.like_count + likes,
                "dislike_count": table.c.dislike_count + dislikes,
                "weight": cast(
                    table.c.like_count + likes - table.c.dislike_count - dislikes, Float
                ) / (table.c.like_count + table.c.dislike_count + likes + dislikes),
                "last_updated": now,
            },
        )
        await self.session.exec(stmt)

    async def revert(
        self,
        persona_id: uuid.UUID,
        attribute: str,
        likes: int = 0,
        dislikes: int = 0
    ) -> None:
        """
        Take back occurrences previously applied to an attribute.
        Rows left with no occurrences are removed. Does not commit.
        """
        table = LearnedWeight.__table__
        remaining = table.c.like_count + table.c.dislike_count - likes - dislikes
        where = (table.c.persona_id == persona_id, table.c.attribute == attribute)

        await self.session.exec(
            update(table).where(*where).values(
                like_count=table.c.like_count - likes,
                dislike_count=table.c.dislike_count - dislikes,
                weight=case(
                    (remaining > 0, cast(
                        table.c.like_count - likes - table.c.dislike_count + dislikes, Float
                    ) / remaining),
                    else_=0.0,
                ),
                last_updated=utc_now(),
            )
        )
        await self.session.exec(
            delete(table).where(*where, table.c.like_count + table.c.dislike_count <= 0)
        )

    async def get_for_attribute(self, persona_id: uuid.UUID, attribute: str) -> Optional[LearnedWeight]:
        query = select(LearnedWeight).where(
            LearnedWeight.persona_id == persona_id,
            LearnedWeight.attribute == attribute
        ).execution_options(populate_existing=True)
        result = await self.session.exec(query)
        return result.first()

    async def list_by_persona(self, persona_id: uuid.UUID) -> List[LearnedWeight]:
        """All weights of a persona in insertion order."""
        query = select(LearnedWeight).where(
            LearnedWeight.persona_id == persona_id
        ).order_by(LearnedWeight.id).execution_options(populate_existing=True)
        result = await self.session.exec(query)
        return list(result.all())

    async def as_map(self, persona_id: uuid.UUID) -> Dict[str, float]:
        """Snapshot of attribute -> weight for scoring."""
        query = select(LearnedWeight.attribute, LearnedWeight.weight).where(
            LearnedWeight.persona_id == persona_id
        )
        result = await self.session.exec(query)
        return {attribute: weight for attribute, weight in result.all()}

    async def top(self, persona_id: uuid.UUID, limit: int = 10) -> List[LearnedWeight]:
        """Strongest weights first (by magnitude), ties in insertion order."""
        query = select(LearnedWeight).where(
            LearnedWeight.persona_id == persona_id
        ).order_by(
            func.abs(LearnedWeight.weight).desc(),
            LearnedWeight.id
        ).limit(limit).execution_options(populate_existing=True)
        result = await self.session.exec(query)
        return list(result.all())

    async def delete_by_persona(self, persona_id: uuid.UUID) -> None:
        """Remove a persona's weights (no commit)."""
        await self.session.exec(delete(LearnedWeight).where(LearnedWeight.persona_id == persona_id))
