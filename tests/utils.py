from __future__ import annotations

import asyncio
import uuid
from collections.abc import Mapping
from typing import Any

from src.domain import Route
from src.domain.errors import (
    AccountExistsError,
    FreshnessCheckFailedError,
    InvalidCredentialsError,
)
from src.infrastructure.identity import ListenerRegistry

INVALID_CREDENTIAL_MESSAGE = "Firebase: Error (auth/invalid-credential)."


class FakeDocumentStore:
    """In-memory document store recording every lookup made against it."""

    def __init__(self, data: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self.data: dict[str, dict[str, Any]] = {
            collection: dict(documents) for collection, documents in (data or {}).items()
        }
        self.probes: list[tuple[str, str]] = []
        self.failures: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.raw: dict[tuple[str, str], Any] = {}
        self.held_keys: set[str] = set()
        self.waiting = asyncio.Event()
        self.release = asyncio.Event()

    def put(self, collection: str, key: str, record: Mapping[str, Any]) -> None:
        self.data.setdefault(collection, {})[key] = dict(record)

    async def get_document(self, collection: str, key: str) -> Any:
        self.probes.append((collection, key))
        if collection in self.failures:
            raise self.failures[collection]
        if collection in self.delays:
            await asyncio.sleep(self.delays[collection])
        if key in self.held_keys:
            self.waiting.set()
            await self.release.wait()
        if (collection, key) in self.raw:
            return self.raw[(collection, key)]
        record = self.data.get(collection, {}).get(key)
        return dict(record) if record is not None else None

    async def set_document(self, collection: str, key: str, data: Mapping[str, Any]) -> None:
        if collection in self.failures:
            raise self.failures[collection]
        self.put(collection, key, data)

    async def add_document(self, collection: str, data: Mapping[str, Any]) -> str:
        key = uuid.uuid4().hex
        self.put(collection, key, data)
        return key

    async def update_document(
        self, collection: str, key: str, changes: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        record = self.data.get(collection, {}).get(key)
        if record is None:
            return None
        record.update(changes)
        return dict(record)

    async def delete_document(self, collection: str, key: str) -> bool:
        return self.data.get(collection, {}).pop(key, None) is not None

    async def list_documents(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> list[tuple[str, dict[str, Any]]]:
        if collection in self.failures:
            raise self.failures[collection]
        return [
            (key, dict(record))
            for key, record in self.data.get(collection, {}).items()
            if not where or all(record.get(k) == v for k, v in where.items())
        ]

    async def ping(self) -> None:
        return None


class FakeIdentity:
    def __init__(self, uid: str, email: str | None = None, *, fresh: bool = True) -> None:
        self.uid = uid
        self.email = email or f"{uid}@example.com"
        self.fresh = fresh
        self.freshness_checks = 0

    async def get_freshness_proof(self, force_refresh: bool = False) -> str:
        self.freshness_checks += 1
        if not self.fresh:
            raise FreshnessCheckFailedError("Token has been revoked")
        return f"token-{self.uid}"


class FakeIdentityProvider(ListenerRegistry):
    """Identity provider holding accounts in memory, keyed by email."""

    def __init__(self, current: FakeIdentity | None = None) -> None:
        super().__init__(current)
        self.accounts: dict[str, tuple[str, FakeIdentity]] = {}
        self.sign_in_calls = 0

    def add_account(self, uid: str, email: str, password: str) -> FakeIdentity:
        identity = FakeIdentity(uid, email)
        self.accounts[email] = (password, identity)
        return identity

    async def sign_in(self, email: str, password: str) -> FakeIdentity:
        self.sign_in_calls += 1
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise InvalidCredentialsError(INVALID_CREDENTIAL_MESSAGE)
        await self._set_current(account[1])
        return account[1]

    async def sign_out(self) -> None:
        await self._set_current(None)

    async def create_account(self, email: str, password: str) -> FakeIdentity:
        if email in self.accounts:
            raise AccountExistsError(f"Account with email {email} already exists")
        return self.add_account(uuid.uuid4().hex, email, password)

    async def delete_account(self, identity: FakeIdentity) -> None:
        self.accounts.pop(identity.email, None)

    async def identity_from_token(self, token: str) -> FakeIdentity | None:
        for _, identity in self.accounts.values():
            if token == f"token-{identity.uid}":
                return identity
        return None


class RecordingNavigator:
    def __init__(self) -> None:
        self.calls: list[tuple[Route, bool]] = []

    def navigate(self, destination: Route, *, replace: bool = True) -> None:
        self.calls.append((destination, replace))


class FakeRedis:
    """Subset of the asyncio Redis client used for sign-out markers."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.expiries: dict[str, int | None] = {}

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.values[key] = value
        self.expiries[key] = ex
        return True

    async def getdel(self, key: str) -> str | None:
        self.expiries.pop(key, None)
        return self.values.pop(key, None)

    async def ping(self) -> bool:
        return True


def approved(role: str, **extra: Any) -> dict[str, Any]:
    return {"role": role, "approval": True, "status": "active", **extra}


def pending(role: str, **extra: Any) -> dict[str, Any]:
    return {"role": role, "approval": False, "status": "pending", **extra}


def auth_headers(identity: FakeIdentity, session_id: str | None = None) -> dict[str, str]:
    headers = {"Authorization": f"Bearer token-{identity.uid}"}
    if session_id:
        headers["X-Session-ID"] = session_id
    return headers
