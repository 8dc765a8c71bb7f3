"""Staff onboarding: self-registration and admin approval decisions."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
from src.core.auth import Role
from src.domain.errors import AuthError, StaffRecordNotFoundError
from src.domain.models import StaffMember
from src.domain.ports import DocumentStore, IdentityProvider
from src.domain.services.role_resolver import PENDING_STATUS, collection_for

logger = structlog.get_logger()

ACTIVE_STATUS = "active"
REJECTED_STATUS = "rejected"

_RECORD_FIELDS = {
    "firstName",
    "lastName",
    "email",
    "status",
    "approval",
    "createdAt",
    "role",
}


def _ensure_staff_role(role: str) -> str:
    if role not in {r.value for r in Role.staff()}:
        raise ValueError(f"Not a staff role: {role}")
    return role


def _to_member(uid: str, role: str, record: Mapping[str, Any]) -> StaffMember:
    created_raw = record.get("createdAt")
    created_at = datetime.now(UTC)
    if isinstance(created_raw, datetime):
        created_at = created_raw
    elif isinstance(created_raw, str):
        try:
            created_at = datetime.fromisoformat(created_raw.replace("Z", "+00:00"))
        except ValueError:
            pass
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)

    return StaffMember(
        uid=uid,
        role=role,
        email=record.get("email", ""),
        status=record.get("status", ""),
        approval=record.get("approval") is True,
        first_name=record.get("firstName", ""),
        last_name=record.get("lastName", ""),
        created_at=created_at,
        profile={k: v for k, v in record.items() if k not in _RECORD_FIELDS},
    )


class StaffService:
    """Create pending staff records and apply admin approval decisions."""

    def __init__(self, store: DocumentStore, identity_provider: IdentityProvider) -> None:
        self.store = store
        self.identity_provider = identity_provider

    async def register(
        self,
        role: str,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        profile: Mapping[str, Any] | None = None,
    ) -> StaffMember:
        """Create an account and a pending role record awaiting admin approval."""
        _ensure_staff_role(role)
        await logger.ainfo("staff_register_attempt", role=role, email=email)

        identity = await self.identity_provider.create_account(email, password)

        record: dict[str, Any] = dict(profile or {})
        record.update(
            {
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "status": PENDING_STATUS,
                "approval": False,
                "createdAt": datetime.now(UTC).isoformat(),
                "role": role,
            }
        )
        try:
            await self.store.set_document(collection_for(role), identity.uid, record)
        except AuthError:
            await logger.awarning("staff_register_rolled_back", role=role, uid=identity.uid)
            await self.identity_provider.delete_account(identity)
            raise

        await logger.ainfo("staff_registered", role=role, uid=identity.uid)
        return _to_member(identity.uid, role, record)

    async def list_staff(self, role: str, *, status: str | None = None) -> list[StaffMember]:
        _ensure_staff_role(role)
        where = {"status": status} if status else None
        documents = await self.store.list_documents(collection_for(role), where=where)
        members = [_to_member(uid, role, record) for uid, record in documents]
        return sorted(members, key=lambda member: member.created_at)

    async def approve(self, role: str, uid: str) -> StaffMember:
        return await self._decide(
            role,
            uid,
            {
                "status": ACTIVE_STATUS,
                "approval": True,
                "approvedAt": datetime.now(UTC).isoformat(),
            },
        )

    async def reject(self, role: str, uid: str) -> StaffMember:
        return await self._decide(
            role,
            uid,
            {
                "status": REJECTED_STATUS,
                "approval": False,
                "rejectedAt": datetime.now(UTC).isoformat(),
            },
        )

    async def _decide(self, role: str, uid: str, changes: dict[str, Any]) -> StaffMember:
        _ensure_staff_role(role)
        record = await self.store.update_document(collection_for(role), uid, changes)
        if record is None:
            raise StaffRecordNotFoundError(f"No {role} record for {uid}")

        await logger.ainfo("staff_decision", role=role, uid=uid, status=changes["status"])
        return _to_member(uid, role, record)
