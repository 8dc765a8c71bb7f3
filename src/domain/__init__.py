from src.domain.models import (
    BootstrapOutcome,
    Category,
    MenuItem,
    Principal,
    Resolution,
    ResolutionOutcome,
    RoleStore,
    Route,
    SessionState,
    StaffMember,
)

__all__ = [
    "BootstrapOutcome",
    "Category",
    "MenuItem",
    "Principal",
    "Resolution",
    "ResolutionOutcome",
    "RoleStore",
    "Route",
    "SessionState",
    "StaffMember",
]
