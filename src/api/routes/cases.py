from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_user, get_db_session
from src.api.schemas.cases import CaseListResponse, CaseResponse
from src.domain import User
from src.domain.services.case_pool import CaseNotFoundError, CasePoolService

router = APIRouter(prefix="/cases", tags=["cases"])


@router.get("", response_model=CaseListResponse, summary="List cases in the pool")
async def list_cases(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> CaseListResponse:
    cases, total = await CasePoolService(session).list_cases(limit=limit, offset=offset)
    return CaseListResponse(
        items=[CaseResponse.model_validate(case) for case in cases],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{case_id}", response_model=CaseResponse, summary="Get a single case")
async def get_case(
    case_id: str,
    _: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> CaseResponse:
    try:
        case = await CasePoolService(session).get_case(case_id)
    except CaseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return CaseResponse.model_validate(case)
