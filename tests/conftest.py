from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from src.api.deps import get_db_session, get_uow_factory
from src.api.main import app
from src.core.auth import create_access_token
from src.domain.services.allocation import AllocationService
from src.domain.services.locking import UserLockRegistry
from src.domain.services.sampling import CaseSampler
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import Case, UserModel
from src.infrastructure.db.session import build_engine, build_session_factory
from src.infrastructure.repositories.memory import InMemoryStore, InMemoryUnitOfWork
from src.infrastructure.repositories.unit_of_work import (
    UnitOfWorkFactory,
    sqlalchemy_uow_factory,
)

from tests.utils import case_payload


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def memory_uow_factory(store: InMemoryStore) -> UnitOfWorkFactory:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture()
def allocation(memory_uow_factory: UnitOfWorkFactory) -> AllocationService:
    """Allocation service over the in-memory store with a fixed seed and private locks."""
    return AllocationService(
        memory_uow_factory,
        sampler=CaseSampler(seed=1234),
        locks=UserLockRegistry(),
        default_target=20,
        max_attempts=3,
    )


@pytest.fixture()
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    # File-backed so each session gets its own connection, like a real server
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'casepool.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture()
def sql_uow_factory(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWorkFactory:
    return sqlalchemy_uow_factory(session_factory)


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def seed_cases(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[int], object]:
    """Insert ``count`` cases and return their IDs."""

    async def _seed(count: int) -> list[str]:
        async with session_factory() as session:
            cases = [Case(**case_payload(index)) for index in range(count)]
            session.add_all(cases)
            await session.commit()
            return [case.id for case in cases]

    return _seed


@pytest.fixture()
def seed_user(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., object]:
    """Insert a reviewer directly (no signup top-up) and return its ID."""

    async def _seed(email: str = "reviewer@example.com") -> str:
        async with session_factory() as session:
            user = UserModel(email=email, hashed_password="not-a-real-hash")
            session.add(user)
            await session.commit()
            return user.id

    return _seed


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database dependencies pointed at the test engine."""

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_uow_factory] = lambda: sqlalchemy_uow_factory(session_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.pop(get_db_session, None)
    app.dependency_overrides.pop(get_uow_factory, None)


@pytest.fixture()
def admin_token() -> str:
    return create_access_token("admin-user", roles=["admin"])


@pytest.fixture()
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}
