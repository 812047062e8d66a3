"""
Base repository with generic CRUD operations.
"""
from typing import TypeVar, Generic, Type, Optional, Any

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from dealscout.core.timeutils import utc_now

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.

    Mutating methods commit by default. Pass ``commit=False`` to stage the
    change in the caller's transaction (the session is flushed instead).
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def _persist(self, db_obj: ModelType, commit: bool) -> ModelType:
        self.session.add(db_obj)
        if commit:
            await self.session.commit()
            await self.session.refresh(db_obj)
        else:
            await self.session.flush()
        return db_obj

    async def create(self, obj_in: dict, commit: bool = True) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        return await self._persist(db_obj, commit)

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get a record by ID."""
        return await self.session.get(self.model, id)

    async def update(self, id: Any, obj_in: dict, commit: bool = True) -> Optional[ModelType]:
        """Update a record."""
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field) and value is not None:
                setattr(db_obj, field, value)

        # Update timestamp if exists
        if hasattr(db_obj, 'updated_at'):
            db_obj.updated_at = utc_now()

        return await self._persist(db_obj, commit)

    async def delete(self, id: Any, commit: bool = True) -> bool:
        """Delete a record."""
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        if commit:
            await self.session.commit()
        else:
            await self.session.flush()
        return True

