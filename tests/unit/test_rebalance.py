"""Unit tests for RebalanceService over the in-memory store."""

from __future__ import annotations

import pytest
from src.domain.errors import PersistenceError
from src.domain.services.allocation import AllocationService
from src.domain.services.locking import UserLockRegistry
from src.domain.services.rebalance import RebalanceService
from src.domain.services.sampling import CaseSampler
from src.infrastructure.repositories.memory import (
    AssignmentRecord,
    InMemoryStore,
    InMemoryUnitOfWork,
)


def _pool(store: InMemoryStore, cases: int, users: int) -> list[str]:
    store.add_cases(*(f"c{index}" for index in range(cases)))
    user_ids = [f"u{index}" for index in range(users)]
    store.add_users(*user_ids)
    return user_ids


class TestRebalanceAll:
    @pytest.mark.asyncio
    async def test_every_user_lands_within_range(
        self, store: InMemoryStore, allocation: AllocationService
    ) -> None:
        user_ids = _pool(store, cases=100, users=12)

        report = await RebalanceService(allocation, concurrency=4).rebalance_all(20, 25)

        assert report.processed == 12
        assert report.failures == []
        for user_id in user_ids:
            held = store.held_by(user_id)
            assert 20 <= len(held) <= 25
            assert len(held) == report.targets[user_id]
            assert len(set(held)) == len(held)
        assert report.total_assigned == len(store.assignments)

    @pytest.mark.asyncio
    async def test_existing_assignments_count_towards_target(
        self, store: InMemoryStore, allocation: AllocationService
    ) -> None:
        _pool(store, cases=10, users=1)
        store.assignments.extend(AssignmentRecord("u0", f"c{index}") for index in range(3))

        report = await RebalanceService(allocation).rebalance_all(5, 5)

        assert report.assigned == {"u0": 2}
        assert len(store.held_by("u0")) == 5

    @pytest.mark.asyncio
    async def test_one_failing_user_does_not_abort_batch(self, store: InMemoryStore) -> None:
        user_ids = _pool(store, cases=30, users=4)

        class FlakyAllocation(AllocationService):
            async def top_up(self, user_id: str, target_count: int | None = None) -> int:
                if user_id == "u1":
                    raise PersistenceError("disk full")
                return await super().top_up(user_id, target_count)

        allocation = FlakyAllocation(
            lambda: InMemoryUnitOfWork(store),
            sampler=CaseSampler(seed=11),
            locks=UserLockRegistry(),
        )

        report = await RebalanceService(allocation, concurrency=2).rebalance_all(3, 4)

        assert [failure.user_id for failure in report.failures] == ["u1"]
        assert report.failures[0].error_type == "PersistenceError"
        assert report.failures[0].message == "disk full"
        assert set(report.assigned) == set(user_ids) - {"u1"}
        assert store.held_by("u1") == []
        for user_id in ("u0", "u2", "u3"):
            assert 3 <= len(store.held_by(user_id)) <= 4

    @pytest.mark.asyncio
    async def test_no_users_gives_empty_report(
        self, store: InMemoryStore, allocation: AllocationService
    ) -> None:
        store.add_cases("c1")

        report = await RebalanceService(allocation).rebalance_all(1, 2)

        assert report.processed == 0
        assert report.total_assigned == 0

    @pytest.mark.asyncio
    async def test_defaults_come_from_settings(
        self, store: InMemoryStore, allocation: AllocationService
    ) -> None:
        _pool(store, cases=40, users=2)

        report = await RebalanceService(allocation).rebalance_all()

        assert (report.min_target, report.max_target) == (20, 25)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("low", "high"), [(5, 4), (-1, 3)])
    async def test_invalid_range_is_rejected(
        self, store: InMemoryStore, allocation: AllocationService, low: int, high: int
    ) -> None:
        _pool(store, cases=5, users=1)

        with pytest.raises(ValueError):
            await RebalanceService(allocation).rebalance_all(low, high)

        assert store.assignments == []
