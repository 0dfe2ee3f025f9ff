"""Read access to the case pool and the administrative reset used before reseeding."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from src.infrastructure.db.models import Assignment, Case, ReviewResponse

logger = structlog.get_logger()

CASE_FIELDS = (
    "name",
    "age",
    "sex",
    "occupation",
    "immunizations",
    "chronic_illnesses",
    "minor_illnesses",
    "family_social_history",
    "chief_complaint",
    "current_symptoms",
)


class CaseNotFoundError(Exception):
    """Raised when a case ID does not exist in the pool."""


class CasePoolService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_cases(self, *, limit: int = 50, offset: int = 0) -> tuple[list[Case], int]:
        total = await self.session.scalar(select(func.count()).select_from(Case)) or 0
        stmt = select(Case).order_by(Case.created_at, Case.id).limit(limit).offset(offset)
        cases = list((await self.session.scalars(stmt)).all())
        return cases, total

    async def get_case(self, case_id: str) -> Case:
        case = await self.session.get(Case, case_id)
        if case is None:
            raise CaseNotFoundError(f"Case {case_id} not found")
        return case

    async def reset_pool(self) -> dict[str, int]:
        """Delete every response, assignment and case. Users are left untouched."""
        removed_responses = (await self.session.execute(delete(ReviewResponse))).rowcount
        removed_assignments = (await self.session.execute(delete(Assignment))).rowcount
        removed_cases = (await self.session.execute(delete(Case))).rowcount
        await self.session.commit()

        await logger.awarning(
            "case_pool_reset",
            responses_deleted=removed_responses,
            assignments_deleted=removed_assignments,
            cases_deleted=removed_cases,
        )
        return {
            "responses": removed_responses,
            "assignments": removed_assignments,
            "cases": removed_cases,
        }

    async def load_cases(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Insert case records; unknown keys are ignored, missing required ones fail."""
        cases = [
            Case(**{key: record[key] for key in CASE_FIELDS if key in record})
            for record in records
        ]
        self.session.add_all(cases)
        await self.session.commit()

        await logger.ainfo("case_pool_loaded", cases=len(cases))
        return len(cases)
