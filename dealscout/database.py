from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from .config import settings


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL."""
    return create_async_engine(database_url, echo=echo, future=True)


def build_session_factory(bind: AsyncEngine) -> sessionmaker:
    return sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Create Async Engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
async_session = build_session_factory(engine)


async def init_db(bind: AsyncEngine = None):
    """Create all tables registered on the SQLModel metadata."""
    # Import models so they are registered before create_all
    from . import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session
