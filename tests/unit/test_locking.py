from __future__ import annotations

import asyncio
import gc

import pytest
from src.domain.services.locking import UserLockRegistry, get_user_lock_registry


def test_same_user_gets_same_lock_while_referenced() -> None:
    registry = UserLockRegistry()

    lock = registry.lock_for("u")

    assert registry.lock_for("u") is lock
    assert registry.lock_for("other") is not lock


def test_idle_locks_are_dropped() -> None:
    registry = UserLockRegistry()
    registry.lock_for("u")

    gc.collect()

    assert len(registry) == 0


def test_process_registry_is_shared() -> None:
    assert get_user_lock_registry() is get_user_lock_registry()


@pytest.mark.asyncio
async def test_hold_serialises_same_user() -> None:
    registry = UserLockRegistry()
    order: list[str] = []

    async def worker(name: str) -> None:
        async with registry.hold("u"):
            order.append(f"{name}-start")
            await asyncio.sleep(0.01)
            order.append(f"{name}-end")

    await asyncio.gather(worker("first"), worker("second"))

    assert order == ["first-start", "first-end", "second-start", "second-end"]


@pytest.mark.asyncio
async def test_hold_lets_different_users_interleave() -> None:
    registry = UserLockRegistry()
    order: list[str] = []

    async def worker(user_id: str) -> None:
        async with registry.hold(user_id):
            order.append(f"{user_id}-start")
            await asyncio.sleep(0.01)
            order.append(f"{user_id}-end")

    await asyncio.gather(worker("a"), worker("b"))

    assert order[:2] == ["a-start", "b-start"]
