"""
RQ entry points for allocation work that should not run inside a request.

Each job is a sync function wrapping an async body with ``asyncio.run``; the
engine is disposed at the end because every run gets a fresh event loop.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import Any

import structlog
from src.domain.errors import AllocationError
from src.domain.services.allocation import AllocationService
from src.domain.services.rebalance import RebalanceService
from src.infrastructure.db.session import dispose_engine, get_session_factory
from src.infrastructure.repositories.unit_of_work import (
    UnitOfWorkFactory,
    sqlalchemy_uow_factory,
)

logger = structlog.get_logger()


def top_up_user_job(user_id: str, target_count: int | None = None) -> dict[str, Any]:
    """Top a single user up outside the request cycle."""
    return asyncio.run(_run_with_engine(_top_up_user_async, user_id, target_count))


def rebalance_pool_job(
    min_target: int | None = None,
    max_target: int | None = None,
) -> dict[str, Any]:
    """Top every user up to a random target in ``[min_target, max_target]``."""
    return asyncio.run(_run_with_engine(_rebalance_pool_async, min_target, max_target))


async def _run_with_engine(body, *args: Any) -> dict[str, Any]:
    try:
        return await body(sqlalchemy_uow_factory(get_session_factory()), *args)
    finally:
        await dispose_engine()


async def _top_up_user_async(
    uow_factory: UnitOfWorkFactory,
    user_id: str,
    target_count: int | None,
) -> dict[str, Any]:
    service = AllocationService(uow_factory)
    try:
        assigned = await service.top_up(user_id, target_count)
    except AllocationError as e:
        logger.error(
            "top_up_job_failed",
            user_id=user_id,
            error_type=type(e).__name__,
            error=str(e),
        )
        return {"user_id": user_id, "status": "failed", "error": str(e)}

    logger.info("top_up_job_completed", user_id=user_id, assigned=assigned)
    return {"user_id": user_id, "status": "completed", "assigned": assigned}


async def _rebalance_pool_async(
    uow_factory: UnitOfWorkFactory,
    min_target: int | None,
    max_target: int | None,
) -> dict[str, Any]:
    report = await RebalanceService(AllocationService(uow_factory)).rebalance_all(
        min_target, max_target
    )
    return {
        "status": "completed" if not report.failures else "completed_with_failures",
        "users_processed": report.processed,
        "total_assigned": report.total_assigned,
        "failures": [asdict(failure) for failure in report.failures],
    }
