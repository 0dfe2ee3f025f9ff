from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from src.infrastructure.db.models import Assignment

if TYPE_CHECKING:
    from sqlalchemy import Select


class AssignmentQueryService:
    """Read-side listings of the assignment ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_user(self, user_id: str) -> list[Assignment]:
        stmt: Select[tuple[Assignment]] = (
            select(Assignment)
            .where(Assignment.user_id == user_id)
            .options(selectinload(Assignment.case))
            .order_by(Assignment.assigned_at, Assignment.id)
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_all(self) -> list[Assignment]:
        stmt: Select[tuple[Assignment]] = (
            select(Assignment)
            .options(selectinload(Assignment.case), selectinload(Assignment.user))
            .order_by(Assignment.user_id, Assignment.assigned_at)
        )
        return list((await self.session.scalars(stmt)).all())
