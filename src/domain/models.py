from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class User:
    """Authenticated principal resolved from a bearer token."""

    user_id: str
    email: str = ""
    roles: list[str] = field(default_factory=list)
