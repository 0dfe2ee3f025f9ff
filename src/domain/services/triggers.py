"""Best-effort allocation run as a side effect of signup and login.

Failing to pre-assign cases must never fail the account action that
triggered it, so every error is logged and reported as zero assignments.
"""

from __future__ import annotations

import asyncio

import structlog
from src.core.config import get_settings
from src.domain.services.allocation import AllocationService

logger = structlog.get_logger()


async def allocate_on_signup(allocation: AllocationService, user_id: str) -> int:
    return await _best_effort_top_up(allocation, user_id, None, trigger="signup")


async def allocate_on_login(allocation: AllocationService, user_id: str) -> int:
    target = get_settings().login_target_count
    return await _best_effort_top_up(allocation, user_id, target, trigger="login")


async def _best_effort_top_up(
    allocation: AllocationService,
    user_id: str,
    target_count: int | None,
    *,
    trigger: str,
) -> int:
    timeout = get_settings().allocation_timeout_seconds
    try:
        return await asyncio.wait_for(allocation.top_up(user_id, target_count), timeout=timeout)
    except Exception as exc:
        await logger.awarning(
            "allocation_trigger_failed",
            trigger=trigger,
            user_id=user_id,
            error_type=type(exc).__name__,
            error=str(exc),
            exc_info=True,
        )
        return 0
