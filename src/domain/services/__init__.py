"""Domain services."""

from src.domain.services.allocation import AllocationService, ManualAssignmentResult
from src.domain.services.rebalance import (
    RebalanceFailure,
    RebalanceReport,
    RebalanceService,
)
from src.domain.services.sampling import CaseSampler
from src.domain.services.triggers import allocate_on_login, allocate_on_signup

__all__ = [
    "AllocationService",
    "CaseSampler",
    "ManualAssignmentResult",
    "RebalanceFailure",
    "RebalanceReport",
    "RebalanceService",
    "allocate_on_login",
    "allocate_on_signup",
]
