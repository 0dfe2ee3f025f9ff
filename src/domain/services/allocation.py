"""Case allocation: top users up to a target number of unique cases."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import TypeVar

import structlog
from src.core.config import get_settings
from src.domain.errors import ConflictError, NotFoundError
from src.domain.services.locking import UserLockRegistry, get_user_lock_registry
from src.domain.services.sampling import CaseSampler
from src.infrastructure.repositories.unit_of_work import UnitOfWorkFactory

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(slots=True)
class ManualAssignmentResult:
    """Outcome of assigning caller-chosen cases to a user."""

    user_id: str
    assigned: list[str] = field(default_factory=list)
    already_assigned: list[str] = field(default_factory=list)
    unknown_case_ids: list[str] = field(default_factory=list)


class AllocationService:
    """Adds just enough new assignments to reach a target, never removing any.

    Each call runs its read-compute-write sequence inside one unit of work
    while holding the user's lock, so overlapping calls for the same user
    cannot both see the same free cases. A uniqueness conflict at commit
    time re-runs the whole sequence, up to ``max_attempts`` times.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        sampler: CaseSampler | None = None,
        locks: UserLockRegistry | None = None,
        default_target: int | None = None,
        max_attempts: int | None = None,
    ) -> None:
        settings = get_settings()
        self.uow_factory = uow_factory
        self.sampler = sampler or CaseSampler(settings.allocation_seed)
        self.locks = locks or get_user_lock_registry()
        self.default_target = (
            default_target if default_target is not None else settings.default_target_count
        )
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.allocation_max_attempts
        )
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def top_up(self, user_id: str, target_count: int | None = None) -> int:
        """Bring ``user_id`` up to ``target_count`` unique cases; return how many were added."""
        target = self.default_target if target_count is None else target_count
        _validate_target(target)

        async with self.locks.hold(user_id):
            added = await self._retry_on_conflict(
                "top_up", user_id, lambda: self._top_up_once(user_id, target)
            )

        if added:
            await logger.ainfo(
                "allocation_top_up_committed",
                user_id=user_id,
                target_count=target,
                assigned=added,
            )
        return added

    async def assign_cases(
        self, user_id: str, case_ids: Iterable[str]
    ) -> ManualAssignmentResult:
        """Assign specific cases, skipping ones the user holds or the pool lacks."""
        requested = list(dict.fromkeys(case_ids))

        async with self.locks.hold(user_id):
            result = await self._retry_on_conflict(
                "assign_cases", user_id, lambda: self._assign_once(user_id, requested)
            )

        await logger.ainfo(
            "allocation_manual_committed",
            user_id=user_id,
            requested=len(requested),
            assigned=len(result.assigned),
            already_assigned=len(result.already_assigned),
            unknown=len(result.unknown_case_ids),
        )
        return result

    async def _top_up_once(self, user_id: str, target: int) -> int:
        async with self.uow_factory() as uow:
            if not await uow.users.lock(user_id):
                raise NotFoundError(f"User {user_id} not found")

            held = await uow.assignments.case_ids_for(user_id)
            if len(held) >= target:
                await logger.adebug(
                    "allocation_top_up_saturated", user_id=user_id, held=len(held), target=target
                )
                return 0

            available = await uow.cases.available_ids_for(user_id)
            if not available:
                await logger.ainfo("allocation_pool_exhausted", user_id=user_id, held=len(held))
                return 0

            chosen = self.sampler.choose(available, target - len(held))
            await uow.assignments.add_many(user_id, chosen)
        return len(chosen)

    async def _assign_once(self, user_id: str, requested: list[str]) -> ManualAssignmentResult:
        result = ManualAssignmentResult(user_id=user_id)
        async with self.uow_factory() as uow:
            if not await uow.users.lock(user_id):
                raise NotFoundError(f"User {user_id} not found")

            held = await uow.assignments.case_ids_for(user_id)
            known = await uow.cases.existing_ids(requested)
            for case_id in requested:
                if case_id in held:
                    result.already_assigned.append(case_id)
                elif case_id in known:
                    result.assigned.append(case_id)
                else:
                    result.unknown_case_ids.append(case_id)

            if result.assigned:
                await uow.assignments.add_many(user_id, result.assigned)
        return result

    async def _retry_on_conflict(
        self, operation: str, user_id: str, attempt_once: Callable[[], Awaitable[T]]
    ) -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await attempt_once()
            except ConflictError:
                if attempt == self.max_attempts:
                    await logger.aerror(
                        "allocation_conflict_exhausted",
                        operation=operation,
                        user_id=user_id,
                        attempts=attempt,
                    )
                    raise
                await logger.awarning(
                    "allocation_conflict_retry",
                    operation=operation,
                    user_id=user_id,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                )
        raise AssertionError("unreachable")  # pragma: no cover


def _validate_target(target: int) -> None:
    if isinstance(target, bool) or not isinstance(target, int):
        raise ValueError(f"target_count must be an integer, got {target!r}")
    if target < 0:
        raise ValueError(f"target_count must be non-negative, got {target}")
