"""Authentication routes - register, login, profile.

Register and login also top the reviewer up with cases. That allocation is
best-effort: its failures are logged and never fail the request.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_allocation_service, get_current_user, get_db_session
from src.api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from src.domain import User
from src.domain.services.allocation import AllocationService
from src.domain.services.auth_service import (
    AccountNotFoundError,
    AuthService,
    InvalidCredentialsError,
    UserExistsError,
)
from src.domain.services.triggers import allocate_on_login, allocate_on_signup

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new reviewer",
)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
    allocation: AllocationService = Depends(get_allocation_service),
) -> AuthResponse:
    service = AuthService(session)

    try:
        result = await service.register_user(
            email=payload.email,
            password=payload.password,
            full_name=payload.full_name,
        )
    except UserExistsError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    assigned = await allocate_on_signup(allocation, result["user"]["id"])

    return AuthResponse(
        message="Registration successful",
        user=UserResponse(**result["user"]),
        tokens=TokenResponse(**result["tokens"]),
        cases_assigned=assigned,
    )


@router.post("/login", response_model=AuthResponse, summary="User login")
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
    allocation: AllocationService = Depends(get_allocation_service),
) -> AuthResponse:
    service = AuthService(session)

    try:
        result = await service.login(email=payload.email, password=payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    assigned = await allocate_on_login(allocation, result["user"]["id"])

    return AuthResponse(
        message="Login successful",
        user=UserResponse(**result["user"]),
        tokens=TokenResponse(**result["tokens"]),
        cases_assigned=assigned,
    )


@router.get("/me", response_model=MeResponse, summary="Get current user")
async def get_me(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> MeResponse:
    service = AuthService(session)

    try:
        user_data = await service.get_user_by_id(user.user_id)
    except AccountNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    return MeResponse(user=UserResponse(**user_data))
