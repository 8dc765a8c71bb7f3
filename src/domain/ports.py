"""Capabilities the domain services consume.

Implementations live in ``src.infrastructure``; tests substitute in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

from src.domain.models import Route


class Identity(Protocol):
    """Authenticated principal handed out by an identity provider."""

    @property
    def uid(self) -> str: ...

    @property
    def email(self) -> str: ...

    async def get_freshness_proof(self, force_refresh: bool = False) -> str:
        """Return a currently valid credential token or raise FreshnessCheckFailedError."""
        ...


IdentityCallback = Callable[[Identity | None], Awaitable[Any]]
Unsubscribe = Callable[[], None]


class IdentityProvider(Protocol):
    async def sign_in(self, email: str, password: str) -> Identity:
        """Authenticate credentials or raise InvalidCredentialsError."""
        ...

    async def sign_out(self) -> None: ...

    def current_identity(self) -> Identity | None: ...

    async def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe:
        """Register ``callback`` and deliver the current identity to it once."""
        ...

    async def create_account(self, email: str, password: str) -> Identity: ...

    async def delete_account(self, identity: Identity) -> None:
        """Remove an account created by ``create_account``."""
        ...

    async def identity_from_token(self, token: str) -> Identity | None: ...

    async def restore_session(self, identity: Identity | None) -> None: ...


class DocumentStore(Protocol):
    """Keyed document collections. Failures raise StoreUnavailableError."""

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None: ...

    async def set_document(self, collection: str, key: str, data: Mapping[str, Any]) -> None: ...

    async def add_document(self, collection: str, data: Mapping[str, Any]) -> str: ...

    async def update_document(
        self, collection: str, key: str, changes: Mapping[str, Any]
    ) -> dict[str, Any] | None: ...

    async def delete_document(self, collection: str, key: str) -> bool: ...

    async def list_documents(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> list[tuple[str, dict[str, Any]]]: ...

    async def ping(self) -> None: ...


class Navigator(Protocol):
    def navigate(self, destination: Route, *, replace: bool = True) -> None: ...


class SignOutMarker(Protocol):
    """Short-lived flag set on explicit sign-out and consumed on next load."""

    async def set(self) -> None: ...

    async def consume(self) -> bool: ...
