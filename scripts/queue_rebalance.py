#!/usr/bin/env python3
"""
Enqueue a pool rebalance on the RQ worker.

Usage:
    poetry run python scripts/queue_rebalance.py [min_target] [max_target]
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.workers.jobs import rebalance_pool_job
from src.workers.worker import get_queue


def main() -> None:
    min_target = int(sys.argv[1]) if len(sys.argv) > 1 else None
    max_target = int(sys.argv[2]) if len(sys.argv) > 2 else None

    job = get_queue("default").enqueue(
        rebalance_pool_job,
        min_target=min_target,
        max_target=max_target,
        job_timeout=600,
    )
    print(f"✅ Queued rebalance job {job.id}")
    print("   Run the worker to process it: poetry run python -m src.workers.worker")


if __name__ == "__main__":
    main()
