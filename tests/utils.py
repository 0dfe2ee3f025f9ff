from __future__ import annotations

from typing import Any

from src.api.deps import issue_smoke_token
from src.core.auth import Role


def auth_headers(user_id: str = "reviewer-1", role: Role = Role.REVIEWER) -> dict[str, str]:
    token = issue_smoke_token(user_id, role=role, email="reviewer@example.com")
    return {"Authorization": f"Bearer {token}"}


def case_payload(index: int = 0, **overrides: Any) -> dict[str, Any]:
    """Column values for one vignette in the pool."""
    payload: dict[str, Any] = {
        "name": f"Patient {index:03d}",
        "age": 20 + index % 60,
        "sex": ("Male", "Female", "Other")[index % 3],
        "occupation": "Teacher",
        "immunizations": ["MMR", "Polio"],
        "chronic_illnesses": ["Asthma"] if index % 2 else [],
        "minor_illnesses": ["Cold"],
        "family_social_history": "Lives with family. Non-smoker.",
        "chief_complaint": "Persistent cough for two weeks.",
        "current_symptoms": ["Cough", "Fatigue"],
    }
    payload.update(overrides)
    return payload
