#!/usr/bin/env python3
"""
Print a signed bearer token for calling the admin assignment routes.

Usage:
    poetry run python scripts/issue_admin_token.py <user_id> [email]
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.deps import issue_smoke_token
from src.core.auth import Role


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: poetry run python scripts/issue_admin_token.py <user_id> [email]")
        sys.exit(1)

    email = sys.argv[2] if len(sys.argv) > 2 else None
    print(issue_smoke_token(sys.argv[1], role=Role.ADMIN, email=email))


if __name__ == "__main__":
    main()
