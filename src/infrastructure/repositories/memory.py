"""In-memory implementation of the allocation storage contracts.

Writes are staged per unit of work and applied on commit, where the
(user, case) uniqueness invariant is re-checked the same way a database
constraint would. Every repository call yields to the event loop once so
interleavings between concurrent units of work resemble real I/O.
"""

from __future__ import annotations

import asyncio
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from src.domain.errors import ConflictError

logger = structlog.get_logger()


@dataclass(slots=True, frozen=True)
class AssignmentRecord:
    user_id: str
    case_id: str
    assigned_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class InMemoryStore:
    users: list[str] = field(default_factory=list)
    case_ids: list[str] = field(default_factory=list)
    assignments: list[AssignmentRecord] = field(default_factory=list)
    commits: int = 0

    def add_users(self, *user_ids: str) -> None:
        self.users.extend(user_ids)

    def add_cases(self, *case_ids: str) -> None:
        self.case_ids.extend(case_ids)

    def held_by(self, user_id: str) -> list[str]:
        """Case IDs for every committed row of ``user_id``, duplicates included."""
        return [row.case_id for row in self.assignments if row.user_id == user_id]


class _Users:
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    async def lock(self, user_id: str) -> bool:
        await asyncio.sleep(0)
        return user_id in self._uow.store.users

    async def list_ids(self) -> list[str]:
        await asyncio.sleep(0)
        return list(self._uow.store.users)


class _Cases:
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    async def available_ids_for(self, user_id: str) -> list[str]:
        await asyncio.sleep(0)
        held = self._uow.visible_case_ids(user_id)
        return [case_id for case_id in self._uow.store.case_ids if case_id not in held]

    async def existing_ids(self, case_ids: Collection[str]) -> set[str]:
        await asyncio.sleep(0)
        return set(case_ids).intersection(self._uow.store.case_ids)


class _Assignments:
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    async def case_ids_for(self, user_id: str) -> set[str]:
        await asyncio.sleep(0)
        return self._uow.visible_case_ids(user_id)

    async def add_many(self, user_id: str, case_ids: Collection[str]) -> None:
        await asyncio.sleep(0)
        self._uow.pending.extend(AssignmentRecord(user_id, case_id) for case_id in case_ids)


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.pending: list[AssignmentRecord] = []
        self.users = _Users(self)
        self.cases = _Cases(self)
        self.assignments = _Assignments(self)

    async def __aenter__(self) -> InMemoryUnitOfWork:
        self.pending = []
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            await self.commit()

    def visible_case_ids(self, user_id: str) -> set[str]:
        committed = set(self.store.held_by(user_id))
        staged = {row.case_id for row in self.pending if row.user_id == user_id}
        return committed | staged

    async def commit(self) -> None:
        await asyncio.sleep(0)
        seen = {(row.user_id, row.case_id) for row in self.store.assignments}
        for row in self.pending:
            key = (row.user_id, row.case_id)
            if key in seen:
                self.pending = []
                raise ConflictError(f"Case {row.case_id} already assigned to {row.user_id}")
            seen.add(key)
        self.store.assignments.extend(self.pending)
        self.store.commits += 1
        self.pending = []

    async def rollback(self) -> None:
        logger.debug("uow_rollback", discarded=len(self.pending))
        self.pending = []
