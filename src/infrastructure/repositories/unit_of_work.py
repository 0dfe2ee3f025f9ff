"""Repository contracts and the SQLAlchemy unit of work used by the allocator."""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.domain.errors import ConflictError, PersistenceError
from src.infrastructure.db.models import Assignment, Case, UserModel

logger = structlog.get_logger()


class UserRepository(Protocol):
    async def lock(self, user_id: str) -> bool:
        """Return whether the user exists, holding a row lock until the unit of work ends."""
        ...

    async def list_ids(self) -> list[str]: ...


class CaseRepository(Protocol):
    async def available_ids_for(self, user_id: str) -> list[str]:
        """IDs of cases the user does not hold yet."""
        ...

    async def existing_ids(self, case_ids: Collection[str]) -> set[str]: ...


class AssignmentRepository(Protocol):
    async def case_ids_for(self, user_id: str) -> set[str]: ...

    async def add_many(self, user_id: str, case_ids: Collection[str]) -> None: ...


class UnitOfWork(Protocol):
    users: UserRepository
    cases: CaseRepository
    assignments: AssignmentRepository

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...


UnitOfWorkFactory = Callable[[], UnitOfWork]


@dataclass
class SqlUserRepository:
    session: AsyncSession

    async def lock(self, user_id: str) -> bool:
        # FOR UPDATE serialises same-user allocations across processes; SQLite ignores it
        stmt = select(UserModel.id).where(UserModel.id == user_id).with_for_update()
        return await self.session.scalar(stmt) is not None

    async def list_ids(self) -> list[str]:
        stmt = select(UserModel.id).order_by(UserModel.created_at, UserModel.id)
        return list((await self.session.scalars(stmt)).all())


@dataclass
class SqlCaseRepository:
    session: AsyncSession

    async def available_ids_for(self, user_id: str) -> list[str]:
        held = select(Assignment.case_id).where(Assignment.user_id == user_id)
        stmt = select(Case.id).where(Case.id.not_in(held))
        return list((await self.session.scalars(stmt)).all())

    async def existing_ids(self, case_ids: Collection[str]) -> set[str]:
        if not case_ids:
            return set()
        stmt = select(Case.id).where(Case.id.in_(list(case_ids)))
        return set((await self.session.scalars(stmt)).all())


@dataclass
class SqlAssignmentRepository:
    session: AsyncSession

    async def case_ids_for(self, user_id: str) -> set[str]:
        stmt = select(Assignment.case_id).where(Assignment.user_id == user_id)
        return set((await self.session.scalars(stmt)).all())

    async def add_many(self, user_id: str, case_ids: Collection[str]) -> None:
        self.session.add_all(Assignment(user_id=user_id, case_id=case_id) for case_id in case_ids)
        # Flush now so a uniqueness violation surfaces inside the unit of work
        await self.session.flush()


class SqlAlchemyUnitOfWork:
    """One transaction over a fresh session; commits on clean exit, rolls back otherwise."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self._session_factory()
        self.users = SqlUserRepository(self.session)
        self.cases = SqlCaseRepository(self.session)
        self.assignments = SqlAssignmentRepository(self.session)
        logger.debug("uow_enter")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc:
                await self.rollback()
                _raise_translated(exc)
            else:
                await self.commit()
        finally:
            if self.session is not None:
                await self.session.close()
            logger.debug("uow_exit", exc_type=str(exc_type) if exc_type else None)

    async def commit(self) -> None:
        session = self._require_session()
        try:
            await session.commit()
        except SQLAlchemyError as exc:
            await self.rollback()
            _raise_translated(exc)
        logger.debug("uow_commit")

    async def rollback(self) -> None:
        if self.session is None:
            return
        try:
            await self.session.rollback()
        except SQLAlchemyError as exc:
            await logger.aerror("uow_rollback_failed", error_type=type(exc).__name__)
            raise PersistenceError(f"Rollback failed: {exc.__class__.__name__}") from exc
        logger.debug("uow_rollback")

    def _require_session(self) -> AsyncSession:
        if self.session is None:
            raise RuntimeError("Unit of work used outside 'async with'")
        return self.session


def sqlalchemy_uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> UnitOfWorkFactory:
    return lambda: SqlAlchemyUnitOfWork(session_factory)


def _raise_translated(exc: BaseException) -> None:
    if isinstance(exc, IntegrityError):
        raise ConflictError("Assignment already exists for this user and case") from exc
    if isinstance(exc, SQLAlchemyError):
        raise PersistenceError(f"Storage failure: {exc.__class__.__name__}") from exc
