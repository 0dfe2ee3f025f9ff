#!/usr/bin/env python3
"""
Create an admin account. Public signup only ever creates reviewers.

Usage:
    poetry run python scripts/create_admin.py <email> <password> [full_name]
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio

from src.core.logging import setup_logging
from src.domain.services.auth_service import AuthService, UserExistsError
from src.infrastructure.db.models import UserRole
from src.infrastructure.db.session import dispose_engine, get_session_factory


async def main() -> int:
    if len(sys.argv) < 3:
        print("Usage: poetry run python scripts/create_admin.py <email> <password> [full_name]")
        return 1

    email, password = sys.argv[1], sys.argv[2]
    full_name = sys.argv[3] if len(sys.argv) > 3 else None

    setup_logging(json=False)
    try:
        async with get_session_factory()() as session:
            result = await AuthService(session).register_user(
                email=email,
                password=password,
                full_name=full_name,
                role=UserRole.ADMIN,
            )
    except UserExistsError as exc:
        print(f"❌ {exc}")
        return 1
    finally:
        await dispose_engine()

    print(f"✅ Created admin {result['user']['email']} ({result['user']['id']})")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
