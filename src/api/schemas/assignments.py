from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from src.api.schemas.cases import CaseResponse


class AssignCasesRequest(BaseModel):
    """Manually assign specific cases to a user."""

    user_id: str = Field(..., min_length=1)
    case_ids: list[str] = Field(..., description="Held or unknown IDs are skipped")


class AssignCasesResponse(BaseModel):
    user_id: str
    assigned: int
    assigned_case_ids: list[str]
    already_assigned: list[str]
    unknown_case_ids: list[str]


class TopUpRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    target_count: int | None = Field(None, ge=0, description="Defaults to DEFAULT_TARGET_COUNT")


class TopUpResponse(BaseModel):
    user_id: str
    assigned: int


class RebalanceRequest(BaseModel):
    min_target: int | None = Field(None, ge=0)
    max_target: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def check_range(self) -> RebalanceRequest:
        if (
            self.min_target is not None
            and self.max_target is not None
            and self.min_target > self.max_target
        ):
            raise ValueError("min_target must not exceed max_target")
        return self


class RebalanceFailureResponse(BaseModel):
    user_id: str
    error_type: str
    message: str


class RebalanceResponse(BaseModel):
    min_target: int
    max_target: int
    users_processed: int
    total_assigned: int
    assigned: dict[str, int]
    failures: list[RebalanceFailureResponse]


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    case_id: str
    assigned_at: datetime
    case: CaseResponse | None = None
