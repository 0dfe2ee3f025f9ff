"""Bulk top-up of every user after the case pool is reseeded."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import structlog
from src.core.config import get_settings
from src.domain.services.allocation import AllocationService

logger = structlog.get_logger()


@dataclass(slots=True)
class RebalanceFailure:
    user_id: str
    error_type: str
    message: str


@dataclass(slots=True)
class RebalanceReport:
    min_target: int
    max_target: int
    targets: dict[str, int] = field(default_factory=dict)
    assigned: dict[str, int] = field(default_factory=dict)
    failures: list[RebalanceFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.targets)

    @property
    def total_assigned(self) -> int:
        return sum(self.assigned.values())


class RebalanceService:
    """Top up each user to an independently drawn target.

    Users run with bounded parallelism; one user's failure is recorded in the
    report and never stops the rest of the batch.
    """

    def __init__(self, allocation: AllocationService, *, concurrency: int | None = None) -> None:
        self.allocation = allocation
        self.concurrency = concurrency or get_settings().rebalance_concurrency

    async def rebalance_all(
        self, min_target: int | None = None, max_target: int | None = None
    ) -> RebalanceReport:
        settings = get_settings()
        low = settings.rebalance_min_target if min_target is None else min_target
        high = settings.rebalance_max_target if max_target is None else max_target
        if low < 0 or high < low:
            raise ValueError(f"Invalid target range [{low}, {high}]")

        async with self.allocation.uow_factory() as uow:
            user_ids = await uow.users.list_ids()

        report = RebalanceReport(min_target=low, max_target=high)
        # Draw every target before any task runs so a seeded sampler is reproducible
        for user_id in user_ids:
            report.targets[user_id] = self.allocation.sampler.pick_target(low, high)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _run(user_id: str) -> None:
            async with semaphore:
                try:
                    added = await self.allocation.top_up(user_id, report.targets[user_id])
                except Exception as exc:
                    await logger.awarning(
                        "rebalance_user_failed",
                        user_id=user_id,
                        error_type=type(exc).__name__,
                        error=str(exc),
                    )
                    report.failures.append(
                        RebalanceFailure(user_id, type(exc).__name__, str(exc))
                    )
                    return
                report.assigned[user_id] = added

        await asyncio.gather(*(_run(user_id) for user_id in user_ids))

        await logger.ainfo(
            "rebalance_completed",
            users=report.processed,
            total_assigned=report.total_assigned,
            failures=len(report.failures),
        )
        return report
