from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from src.api.schemas.cases import CaseResponse


class RecordResponseRequest(BaseModel):
    case_id: str = Field(..., min_length=1)
    is_real: bool = Field(..., description="True if the reviewer judges the case real")


class ResponseEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    case_id: str
    is_real: bool
    responded_at: datetime
    case: CaseResponse | None = None
