"""Account registration and login for case reviewers."""

from __future__ import annotations

from dataclasses import asdict
from datetime import UTC, datetime

import structlog
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import Role, issue_token_pair
from src.infrastructure.db.models import UserModel, UserRole

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthError(Exception):
    """Base exception for authentication errors."""


class UserExistsError(AuthError):
    """Raised when attempting to register with existing email."""


class InvalidCredentialsError(AuthError):
    """Raised when login credentials are invalid."""


class AccountNotFoundError(AuthError):
    """Raised when the authenticated account no longer exists."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class AuthService:
    """Creates and authenticates accounts. Case allocation is left to the caller."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def register_user(
        self,
        *,
        email: str,
        password: str,
        full_name: str | None = None,
        role: UserRole = UserRole.REVIEWER,
    ) -> dict:
        await logger.ainfo("register_attempt", email=email, role=role.value)

        user = UserModel(
            email=email.lower(),
            hashed_password=hash_password(password),
            full_name=full_name,
            role=role,
        )

        try:
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)
        except IntegrityError as exc:
            await self.session.rollback()
            await logger.awarning("register_duplicate_email", email=email)
            raise UserExistsError(f"User with email {email} already exists") from exc

        await logger.ainfo("register_success", user_id=user.id)
        return {"user": self._user_to_dict(user), "tokens": self._tokens_for(user)}

    async def login(self, *, email: str, password: str) -> dict:
        await logger.ainfo("login_attempt", email=email)

        user = await self.session.scalar(
            select(UserModel).where(UserModel.email == email.lower())
        )
        if user is None or not verify_password(password, user.hashed_password):
            await logger.awarning("login_invalid_credentials", email=email)
            raise InvalidCredentialsError("Invalid email or password")

        user.last_login_at = datetime.now(UTC)
        await self.session.commit()
        await self.session.refresh(user)

        await logger.ainfo("login_success", user_id=user.id)
        return {"user": self._user_to_dict(user), "tokens": self._tokens_for(user)}

    async def get_user_by_id(self, user_id: str) -> dict:
        user = await self.session.get(UserModel, user_id)
        if user is None:
            raise AccountNotFoundError(f"User {user_id} not found")
        return self._user_to_dict(user)

    def _tokens_for(self, user: UserModel) -> dict:
        return asdict(issue_token_pair(user.id, role=Role(user.role.value), email=user.email))

    def _user_to_dict(self, user: UserModel) -> dict:
        return {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "role": user.role.value,
            "created_at": user.created_at,
            "last_login_at": user.last_login_at,
        }
