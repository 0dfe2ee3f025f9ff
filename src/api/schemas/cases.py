from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    age: int
    sex: str
    occupation: str
    immunizations: list[str] | None = None
    chronic_illnesses: list[str] | None = None
    minor_illnesses: list[str] | None = None
    family_social_history: str
    chief_complaint: str
    current_symptoms: list[str]
    created_at: datetime


class CaseListResponse(BaseModel):
    items: list[CaseResponse]
    total: int
    limit: int
    offset: int
