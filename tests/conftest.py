import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from dealscout.database import build_session_factory, get_session, init_db
from dealscout.main import app
from dealscout.schemas.persona import PersonaCreate, PersonaCriteria
from dealscout.services.persona_service import PersonaService


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with build_session_factory(engine)() as session:
        yield session


@pytest_asyncio.fixture
async def client(engine):
    """HTTP client with the session dependency bound to the test database."""
    factory = build_session_factory(engine)

    async def override_get_session():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def founder_criteria():
    return PersonaCriteria(
        positive_highlights=["serial_founder", "prior_exit", "yc_alumni"],
        negative_highlights=["career_gap"],
        red_flags=["no_experience"],
        weights={"serial_founder": 0.9, "prior_exit": 0.85, "yc_alumni": 0.8},
    )


@pytest_asyncio.fixture
async def persona(session, founder_criteria):
    """Active persona with the founder criteria."""
    service = PersonaService(session)
    created = await service.create(PersonaCreate(name="Founder Hunter", criteria=founder_criteria))
    return await service.set_active(created.id)
