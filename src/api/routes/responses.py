"""Reviewer responses: record a verdict on an assigned case, list my verdicts."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_current_user, get_db_session
from src.api.schemas.responses import RecordResponseRequest, ResponseEntry
from src.domain import User
from src.domain.services.case_pool import CaseNotFoundError
from src.domain.services.responses import CaseNotAssignedError, ResponseService

router = APIRouter(prefix="/responses", tags=["responses"])


@router.post(
    "",
    response_model=ResponseEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Record whether an assigned case is real or synthetic",
)
async def record_response(
    payload: RecordResponseRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ResponseEntry:
    try:
        response = await ResponseService(session).record(
            user.user_id, payload.case_id, is_real=payload.is_real
        )
    except CaseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except CaseNotAssignedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    return ResponseEntry.model_validate(response)


@router.get("/me", response_model=list[ResponseEntry], summary="List my recorded responses")
async def list_my_responses(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> list[ResponseEntry]:
    responses = await ResponseService(session).list_for_user(user.user_id)
    return [ResponseEntry.model_validate(row) for row in responses]
