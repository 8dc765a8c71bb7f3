"""Role resolution for authenticated identities.

An identity's role is the first store, in ``ROLE_STORES`` order, holding a
record under the identity's uid. Staff roles are additionally gated on admin
approval before they may operate.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from src.core.auth import Role
from src.core.config import get_settings
from src.domain.errors import (
    MalformedRecordError,
    NoAccountError,
    PendingApprovalError,
    RoleLookupError,
    StoreUnavailableError,
)
from src.domain.models import Resolution, ResolutionOutcome, RoleStore, Route
from src.domain.ports import DocumentStore, Identity

logger = structlog.get_logger()

PENDING_STATUS = "pending"
FALLBACK_ROLE = Role.USER.value

ROLE_STORES: tuple[RoleStore, ...] = (
    RoleStore(collection="Admin", role=Role.ADMIN.value),
    RoleStore(collection="Waiters", role=Role.WAITER.value, approval_gated=True),
    RoleStore(collection="Chefs", role=Role.CHEF.value, approval_gated=True),
    RoleStore(collection="Cashiers", role=Role.CASHIER.value, approval_gated=True),
    RoleStore(collection="Users", role=None),
)

DESTINATIONS: dict[str, Route] = {
    Role.ADMIN.value: Route.ADMIN_DASHBOARD,
    Role.WAITER.value: Route.WAITER_DASHBOARD,
    Role.CHEF.value: Route.CHEF_DASHBOARD,
    Role.CASHIER.value: Route.CASHIER_DASHBOARD,
}


def destination_for(role: str) -> Route:
    """Map a role name to its landing route; unknown roles go home."""
    return DESTINATIONS.get(role, Route.HOME)


def collection_for(role: str) -> str:
    """Return the dedicated store collection for a staff or admin role."""
    for store in ROLE_STORES:
        if store.role == role:
            return store.collection
    raise ValueError(f"No dedicated store for role: {role}")


def is_approved(record: Mapping[str, Any]) -> bool:
    return record.get("approval") is True and record.get("status") != PENDING_STATUS


def role_from_record(record: Mapping[str, Any]) -> str:
    return record.get("role") or record.get("userType") or FALLBACK_ROLE


def ensure_eligible(resolution: Resolution) -> Resolution:
    """Raise the matching domain error unless the resolution is eligible."""
    if resolution.outcome is ResolutionOutcome.ELIGIBLE:
        return resolution
    if resolution.outcome is ResolutionOutcome.PENDING_APPROVAL:
        raise PendingApprovalError(resolution.role or FALLBACK_ROLE)
    if resolution.outcome is ResolutionOutcome.NO_ACCOUNT:
        raise NoAccountError("No account found for this identity")
    raise RoleLookupError(resolution.error or "Role lookup failed")


class RoleResolver:
    """Resolve identities to roles, approval state and destination."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        stores: Sequence[RoleStore] = ROLE_STORES,
        probe_timeout_seconds: float | None = None,
    ) -> None:
        self.store = store
        self.stores = tuple(stores)
        self.probe_timeout_seconds = (
            probe_timeout_seconds
            if probe_timeout_seconds is not None
            else get_settings().store_probe_timeout_seconds
        )

    async def resolve(self, identity: Identity) -> Resolution:
        uid = identity.uid
        try:
            for store in self.stores:
                record = await self._probe(store, uid)
                if record is None:
                    continue
                resolution = self._resolve_record(store, record)
                await logger.ainfo(
                    "role_resolved",
                    uid=uid,
                    collection=store.collection,
                    role=resolution.role,
                    outcome=resolution.outcome.value,
                )
                return resolution
        except RoleLookupError as exc:
            await logger.awarning("role_resolution_failed", uid=uid, error=str(exc))
            return Resolution.failed(str(exc))

        await logger.ainfo("role_resolved", uid=uid, outcome=ResolutionOutcome.NO_ACCOUNT.value)
        return Resolution.no_account()

    async def _probe(self, store: RoleStore, uid: str) -> Mapping[str, Any] | None:
        try:
            record = await asyncio.wait_for(
                self.store.get_document(store.collection, uid),
                timeout=self.probe_timeout_seconds,
            )
        except TimeoutError as exc:
            raise StoreUnavailableError(
                f"Timed out looking up {store.collection} after {self.probe_timeout_seconds}s"
            ) from exc
        except RoleLookupError:
            raise
        except Exception as exc:
            raise StoreUnavailableError(f"Lookup in {store.collection} failed: {exc}") from exc

        if record is not None and not isinstance(record, Mapping):
            raise MalformedRecordError(f"Malformed record in {store.collection} for {uid}")
        return record

    def _resolve_record(self, store: RoleStore, record: Mapping[str, Any]) -> Resolution:
        role = store.role if store.role is not None else role_from_record(record)
        if not isinstance(role, str):
            raise MalformedRecordError(f"Malformed role field in {store.collection}: {role!r}")

        if store.approval_gated and not is_approved(record):
            return Resolution(
                role=role,
                eligible=False,
                destination=None,
                outcome=ResolutionOutcome.PENDING_APPROVAL,
            )

        return Resolution(
            role=role,
            eligible=True,
            destination=destination_for(role),
            outcome=ResolutionOutcome.ELIGIBLE,
        )
