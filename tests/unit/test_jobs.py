from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from src.infrastructure.repositories.memory import InMemoryStore, InMemoryUnitOfWork
from src.workers import jobs, worker


def _memory_factory(store: InMemoryStore):
    return lambda: InMemoryUnitOfWork(store)


@pytest.mark.asyncio
async def test_top_up_body_reports_assigned_count() -> None:
    store = InMemoryStore()
    store.add_users("u1")
    store.add_cases(*(f"c{i}" for i in range(30)))

    result = await jobs._top_up_user_async(_memory_factory(store), "u1", 12)

    assert result == {"user_id": "u1", "status": "completed", "assigned": 12}
    assert len(store.held_by("u1")) == 12


@pytest.mark.asyncio
async def test_top_up_body_reports_missing_user_as_failed() -> None:
    store = InMemoryStore()

    result = await jobs._top_up_user_async(_memory_factory(store), "ghost", None)

    assert result["status"] == "failed"
    assert "ghost" in result["error"]


@pytest.mark.asyncio
async def test_rebalance_body_summarises_report() -> None:
    store = InMemoryStore()
    store.add_users("u1", "u2")
    store.add_cases(*(f"c{i}" for i in range(40)))

    result = await jobs._rebalance_pool_async(_memory_factory(store), 3, 3)

    assert result["status"] == "completed"
    assert result["users_processed"] == 2
    assert result["total_assigned"] == 6
    assert result["failures"] == []


def test_top_up_job_disposes_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    store = InMemoryStore()
    store.add_users("u1")
    store.add_cases("c1", "c2")
    dispose = AsyncMock()
    monkeypatch.setattr(jobs, "get_session_factory", MagicMock())
    monkeypatch.setattr(jobs, "sqlalchemy_uow_factory", lambda _factory: _memory_factory(store))
    monkeypatch.setattr(jobs, "dispose_engine", dispose)

    result = jobs.top_up_user_job("u1", 5)

    assert result["assigned"] == 2
    dispose.assert_awaited_once()


def test_get_queue_rejects_unknown_name() -> None:
    with pytest.raises(ValueError):
        worker.get_queue("bulk", connection=MagicMock())


def test_get_queue_uses_given_connection() -> None:
    connection = MagicMock()

    queue = worker.get_queue("high", connection=connection)

    assert queue.name == "high"
    assert queue.connection is connection


def test_registered_jobs_point_at_job_functions() -> None:
    assert worker.REGISTERED_JOBS["top_up_user"] is jobs.top_up_user_job
    assert worker.REGISTERED_JOBS["rebalance_pool"] is jobs.rebalance_pool_job
