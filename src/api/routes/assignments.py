"""Assignment routes: manual assignment, top-up and rebalance for admins, listings."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import (
    get_allocation_service,
    get_current_user,
    get_db_session,
    get_rebalance_service,
    require_admin,
)
from src.api.schemas.assignments import (
    AssignCasesRequest,
    AssignCasesResponse,
    AssignmentResponse,
    RebalanceFailureResponse,
    RebalanceRequest,
    RebalanceResponse,
    TopUpRequest,
    TopUpResponse,
)
from src.domain import User
from src.domain.errors import AllocationError, ConflictError, NotFoundError, PersistenceError
from src.domain.services.allocation import AllocationService
from src.domain.services.assignments import AssignmentQueryService
from src.domain.services.rebalance import RebalanceService

logger = structlog.get_logger()
router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.post(
    "",
    response_model=AssignCasesResponse,
    summary="Manually assign specific cases to a user",
)
async def assign_cases(
    payload: AssignCasesRequest,
    _: User = Depends(require_admin),
    allocation: AllocationService = Depends(get_allocation_service),
) -> AssignCasesResponse:
    try:
        result = await allocation.assign_cases(payload.user_id, payload.case_ids)
    except AllocationError as exc:
        raise await _allocation_http_error(exc) from exc

    return AssignCasesResponse(
        user_id=result.user_id,
        assigned=len(result.assigned),
        assigned_case_ids=result.assigned,
        already_assigned=result.already_assigned,
        unknown_case_ids=result.unknown_case_ids,
    )


@router.post(
    "/top-up",
    response_model=TopUpResponse,
    summary="Top a user up to a target number of unique cases",
)
async def top_up(
    payload: TopUpRequest,
    _: User = Depends(require_admin),
    allocation: AllocationService = Depends(get_allocation_service),
) -> TopUpResponse:
    try:
        assigned = await allocation.top_up(payload.user_id, payload.target_count)
    except AllocationError as exc:
        raise await _allocation_http_error(exc) from exc

    return TopUpResponse(user_id=payload.user_id, assigned=assigned)


@router.post(
    "/rebalance",
    response_model=RebalanceResponse,
    summary="Top every user up to a random target within a range",
)
async def rebalance(
    payload: RebalanceRequest,
    _: User = Depends(require_admin),
    service: RebalanceService = Depends(get_rebalance_service),
) -> RebalanceResponse:
    try:
        report = await service.rebalance_all(payload.min_target, payload.max_target)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    return RebalanceResponse(
        min_target=report.min_target,
        max_target=report.max_target,
        users_processed=report.processed,
        total_assigned=report.total_assigned,
        assigned=report.assigned,
        failures=[
            RebalanceFailureResponse(
                user_id=failure.user_id,
                error_type=failure.error_type,
                message=failure.message,
            )
            for failure in report.failures
        ],
    )


@router.get(
    "",
    response_model=list[AssignmentResponse],
    summary="List all user-case assignments",
)
async def list_assignments(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
) -> list[AssignmentResponse]:
    assignments = await AssignmentQueryService(session).list_all()
    return [AssignmentResponse.model_validate(row) for row in assignments]


@router.get(
    "/me",
    response_model=list[AssignmentResponse],
    summary="List cases assigned to the current user",
)
async def list_my_assignments(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> list[AssignmentResponse]:
    assignments = await AssignmentQueryService(session).list_for_user(user.user_id)
    return [AssignmentResponse.model_validate(row) for row in assignments]


async def _allocation_http_error(exc: AllocationError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PersistenceError):
        await logger.aerror("allocation_persistence_failed", error=str(exc))
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
