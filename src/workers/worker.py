from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog
from redis import Redis
from rq import Queue, Worker
from src.core.config import get_settings
from src.core.logging import setup_logging
from src.workers import jobs

logger = structlog.get_logger()

QUEUE_NAMES: Sequence[str] = ("default", "high")
REGISTERED_JOBS = {
    "top_up_user": jobs.top_up_user_job,
    "rebalance_pool": jobs.rebalance_pool_job,
}


def get_queue(name: str = "default", connection: Redis | None = None) -> Queue:
    """Queue bound to the configured Redis; scripts enqueue allocation jobs through it."""
    if name not in QUEUE_NAMES:
        raise ValueError(f"Unknown queue: {name}")
    return Queue(name, connection=connection or Redis.from_url(get_settings().redis_url))


async def main() -> None:
    """Bootstrap the worker, wiring queues and job handlers."""
    setup_logging()
    settings = get_settings()
    redis_connection = Redis.from_url(settings.redis_url)
    logger.info(
        "worker_bootstrap",
        queues=list(QUEUE_NAMES),
        redis_url=settings.redis_url,
        jobs=list(REGISTERED_JOBS.keys()),
    )

    await asyncio.to_thread(_run_worker, redis_connection, QUEUE_NAMES)


def _run_worker(connection: Redis, queue_names: Sequence[str]) -> None:
    queues = [Queue(name, connection=connection) for name in queue_names]
    worker = Worker(queues, connection=connection, name="casepool-worker")
    worker.work(with_scheduler=True)


if __name__ == "__main__":
    asyncio.run(main())
