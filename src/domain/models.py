from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class Route(str, Enum):
    """Destinations the session layer can send a client to."""

    ADMIN_DASHBOARD = "/dashboard/admin"
    WAITER_DASHBOARD = "/dashboard/waiter"
    CHEF_DASHBOARD = "/dashboard/chef"
    CASHIER_DASHBOARD = "/dashboard/cashier"
    HOME = "/home"
    LOGIN = "/login"


class ResolutionOutcome(str, Enum):
    ELIGIBLE = "eligible"
    PENDING_APPROVAL = "pending_approval"
    NO_ACCOUNT = "no_account"
    ERROR = "error"


class SessionState(str, Enum):
    CHECKING = "checking"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_PENDING = "authenticated_pending"
    REDIRECTING = "redirecting"


@dataclass(frozen=True, slots=True)
class RoleStore:
    """One role collection probed during resolution.

    ``role`` is None for the generic store, whose records carry their own role.
    """

    collection: str
    role: str | None
    approval_gated: bool = False


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving an identity against the role stores."""

    role: str | None
    eligible: bool
    destination: Route | None
    outcome: ResolutionOutcome
    error: str | None = None

    @classmethod
    def no_account(cls) -> Resolution:
        return cls(role=None, eligible=False, destination=None, outcome=ResolutionOutcome.NO_ACCOUNT)

    @classmethod
    def failed(cls, message: str) -> Resolution:
        return cls(
            role=None,
            eligible=False,
            destination=None,
            outcome=ResolutionOutcome.ERROR,
            error=message,
        )


@dataclass(slots=True)
class BootstrapOutcome:
    """State reached by a session bootstrap entry point."""

    state: SessionState
    destination: Route | None = None
    message: str | None = None
    resolution: Resolution | None = None


@dataclass(slots=True)
class Category:
    """Menu category; subcategories name their parent in ``parent_category``."""

    id: str
    name: str
    description: str = ""
    parent_category: str = ""

    @property
    def is_parent(self) -> bool:
        return not self.parent_category


@dataclass(slots=True)
class MenuItem:
    """Represents a dish or drink listed on the menu."""

    id: str
    name: str
    price: float
    category: str
    description: str = ""
    subcategory: str = ""
    is_visible: bool = True
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class StaffMember:
    """Staff role record as seen by the approval workflow."""

    uid: str
    role: str
    email: str
    status: str
    approval: bool
    first_name: str = ""
    last_name: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    profile: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Principal:
    """Identity whose role resolution is eligible for the current request."""

    uid: str
    email: str
    role: str
