#!/usr/bin/env python3
"""
Reset the case pool, load cases from a JSON file and rebalance every user.

Deletes ALL responses, assignments and cases (users are kept), inserts the
records from the file, then tops each user up to a random target in [min, max].

Usage:
    poetry run python scripts/reseed_pool.py <cases.json> [min_target] [max_target]

The JSON file holds a list of objects with the case columns: name, age, sex,
occupation, immunizations, chronic_illnesses, minor_illnesses,
family_social_history, chief_complaint, current_symptoms.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio
import json

from src.core.logging import setup_logging
from src.domain.services.allocation import AllocationService
from src.domain.services.case_pool import CasePoolService
from src.domain.services.rebalance import RebalanceService
from src.infrastructure.db.session import dispose_engine, get_session_factory
from src.infrastructure.repositories.unit_of_work import sqlalchemy_uow_factory


async def reseed(cases_file: Path, min_target: int | None, max_target: int | None) -> int:
    records = json.loads(cases_file.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        print("❌ Cases file must contain a JSON list")
        return 1

    session_factory = get_session_factory()

    print("🔄 Deleting all responses, assignments & cases...")
    async with session_factory() as session:
        pool = CasePoolService(session)
        removed = await pool.reset_pool()
        print(
            f"✅ Removed {removed['responses']} responses, "
            f"{removed['assignments']} assignments, {removed['cases']} cases"
        )

        loaded = await pool.load_cases(records)
        print(f"🌱 Inserted {loaded} cases")

    service = RebalanceService(AllocationService(sqlalchemy_uow_factory(session_factory)))
    report = await service.rebalance_all(min_target, max_target)

    print(
        f"👥 Rebalanced {report.processed} users to "
        f"{report.min_target}-{report.max_target} cases ({report.total_assigned} assigned)"
    )
    for failure in report.failures:
        print(f"   • {failure.user_id}: {failure.error_type}: {failure.message}")

    return 0 if not report.failures else 2


USAGE = "Usage: poetry run python scripts/reseed_pool.py <cases.json> [min_target] [max_target]"


def parse_targets(args: list[str]) -> tuple[int | None, int | None]:
    """Positional min/max after the cases file; missing ones fall back to settings."""
    min_target = int(args[0]) if len(args) > 0 else None
    max_target = int(args[1]) if len(args) > 1 else None
    return min_target, max_target


async def main() -> int:
    if len(sys.argv) < 2:
        print(USAGE)
        return 1

    min_target, max_target = parse_targets(sys.argv[2:])

    setup_logging(json=False)
    try:
        return await reseed(Path(sys.argv[1]), min_target, max_target)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
