"""Error taxonomy for session authorization and the restaurant catalog."""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for authentication and authorization errors."""


class InvalidCredentialsError(AuthError):
    """Raised when the identity provider rejects a sign-in.

    The message is the provider's own and is shown to the user verbatim.
    """


class AccountExistsError(AuthError):
    """Raised when registering an email the identity provider already knows."""


class NoAccountError(AuthError):
    """Raised when an authenticated identity has no role record in any store."""


class PendingApprovalError(AuthError):
    """Raised when a staff role record exists but has not been approved."""

    def __init__(self, role: str) -> None:
        super().__init__(f"Your {role} account is pending admin approval.")
        self.role = role


class FreshnessCheckFailedError(AuthError):
    """Raised when an identity can no longer produce a valid credential proof."""


class RoleLookupError(AuthError):
    """Base exception for failures while probing role stores."""


class StoreUnavailableError(RoleLookupError):
    """Raised when the document store cannot be reached or times out."""


class MalformedRecordError(RoleLookupError):
    """Raised when a stored role record is not a document mapping."""


class CatalogError(Exception):
    """Base exception for menu catalog operations."""


class CatalogNotFoundError(CatalogError):
    """Raised when a category or menu item does not exist."""


class StaffRecordNotFoundError(AuthError):
    """Raised when an approval decision targets a missing staff record."""
