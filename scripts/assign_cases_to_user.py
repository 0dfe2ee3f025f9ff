#!/usr/bin/env python3
"""
Top a single user up to a target number of unique cases.

Usage:
    poetry run python scripts/assign_cases_to_user.py <user_id> [target_count]
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio

from src.core.logging import setup_logging
from src.domain.errors import AllocationError
from src.domain.services.allocation import AllocationService
from src.infrastructure.db.session import dispose_engine, get_session_factory
from src.infrastructure.repositories.unit_of_work import sqlalchemy_uow_factory


async def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: poetry run python scripts/assign_cases_to_user.py <user_id> [target_count]")
        return 1

    user_id = sys.argv[1]
    target = int(sys.argv[2]) if len(sys.argv) > 2 else None

    setup_logging(json=False)
    service = AllocationService(sqlalchemy_uow_factory(get_session_factory()))
    try:
        added = await service.top_up(user_id, target)
    except (AllocationError, ValueError) as exc:
        print(f"❌ {exc}")
        return 1
    finally:
        await dispose_engine()

    print(f"✅ Assigned {added} new cases to user {user_id}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
