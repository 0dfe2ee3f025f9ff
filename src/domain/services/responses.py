"""Reviewer verdicts on the cases they were assigned."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from src.domain.services.case_pool import CaseNotFoundError
from src.infrastructure.db.models import Assignment, Case, ReviewResponse

logger = structlog.get_logger()


class CaseNotAssignedError(Exception):
    """Raised when a reviewer responds to a case that is not in their assignments."""


class ResponseService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record(self, user_id: str, case_id: str, *, is_real: bool) -> ReviewResponse:
        """Store a verdict. Repeat verdicts on the same case are kept as separate rows."""
        case = await self.session.get(Case, case_id)
        if case is None:
            raise CaseNotFoundError(f"Case {case_id} not found")

        assigned = await self.session.scalar(
            select(Assignment.id).where(
                Assignment.user_id == user_id, Assignment.case_id == case_id
            )
        )
        if assigned is None:
            await logger.awarning("response_case_not_assigned", user_id=user_id, case_id=case_id)
            raise CaseNotAssignedError(f"Case {case_id} is not assigned to user {user_id}")

        response = ReviewResponse(user_id=user_id, case_id=case_id, is_real=is_real, case=case)
        self.session.add(response)
        await self.session.commit()

        await logger.ainfo(
            "response_recorded", user_id=user_id, case_id=case_id, is_real=is_real
        )
        return response

    async def list_for_user(self, user_id: str) -> list[ReviewResponse]:
        stmt = (
            select(ReviewResponse)
            .where(ReviewResponse.user_id == user_id)
            .options(selectinload(ReviewResponse.case))
            .order_by(ReviewResponse.responded_at, ReviewResponse.id)
        )
        return list((await self.session.scalars(stmt)).all())
