"""JWT helpers for reviewer and admin bearer tokens."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from src.core.config import get_settings

REFRESH_TOKEN_TTL = timedelta(days=7)


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    REVIEWER = "reviewer"
    ADMIN = "admin"


@dataclass(slots=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


def create_access_token(
    subject: str,
    *,
    roles: Sequence[str],
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed JWT for ``subject`` carrying its roles."""
    settings = get_settings()

    unknown = sorted(set(roles) - set(settings.allowed_roles))
    if unknown:
        raise TokenError(f"Unsupported role(s): {', '.join(unknown)}")

    issued_at = datetime.now(UTC)
    claims: dict[str, object] = {
        "sub": subject,
        "roles": list(roles),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + (expires_delta or _access_ttl())).timestamp()),
        "iss": settings.app_name,
    }
    if email:
        claims["email"] = email

    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def issue_token_pair(subject: str, *, role: Role, email: str | None = None) -> TokenPair:
    """Access plus refresh token for a freshly authenticated user."""
    access_ttl = _access_ttl()
    return TokenPair(
        access_token=create_access_token(
            subject, roles=[role.value], email=email, expires_delta=access_ttl
        ),
        refresh_token=create_access_token(
            subject, roles=[role.value], email=email, expires_delta=REFRESH_TOKEN_TTL
        ),
        expires_in=int(access_ttl.total_seconds()),
    )


def decode_access_token(token: str) -> dict:
    """Decode a bearer token and reject roles this service does not know."""
    settings = get_settings()

    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "roles", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    known = {role.value for role in Role}
    for role in claims.get("roles", []):
        if role not in known:
            raise TokenError(f"Unsupported role: {role}")
    return claims


def _access_ttl() -> timedelta:
    return timedelta(seconds=get_settings().access_token_ttl_seconds)
