"""
Firebase Authentication over REST.

Wraps the Identity Toolkit and Secure Token endpoints and exposes them as an
identity provider. Error codes returned by Firebase are reported in the same
``Firebase: Error (auth/...)`` form the web SDK shows to users.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import jwt
import structlog
from src.core.config import get_settings
from src.domain.errors import (
    AccountExistsError,
    AuthError,
    FreshnessCheckFailedError,
    InvalidCredentialsError,
)
from src.infrastructure.identity.base import ListenerRegistry

logger = structlog.get_logger()

# Tokens this close to expiry are refreshed even without force_refresh.
REFRESH_MARGIN = timedelta(minutes=5)

AUTH_ERROR_CODES = {
    "EMAIL_NOT_FOUND": "user-not-found",
    "INVALID_PASSWORD": "wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
    "INVALID_EMAIL": "invalid-email",
    "USER_DISABLED": "user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
    "EMAIL_EXISTS": "email-already-in-use",
    "WEAK_PASSWORD": "weak-password",
    "TOKEN_EXPIRED": "user-token-expired",
    "INVALID_ID_TOKEN": "invalid-user-token",
    "INVALID_REFRESH_TOKEN": "invalid-refresh-token",
    "USER_NOT_FOUND": "user-not-found",
}


class FirebaseAuthError(AuthError):
    """Raised for errors reported by the Firebase REST API."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


def _error_message(code: str) -> str:
    # WEAK_PASSWORD arrives as "WEAK_PASSWORD : Password should be ..."
    key = code.split(" ", 1)[0]
    return f"Firebase: Error (auth/{AUTH_ERROR_CODES.get(key, key.lower().replace('_', '-'))})."


class FirebaseAuthClient:
    """Thin async client for the Firebase Auth REST endpoints."""

    def __init__(
        self,
        api_key: str | None = None,
        auth_url: str | None = None,
        token_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.firebase_api_key
        self.auth_url = auth_url or settings.firebase_auth_url
        self.token_url = token_url or settings.firebase_token_url
        self.timeout = (
            timeout_seconds if timeout_seconds is not None else settings.http_timeout_seconds
        )
        self._transport = transport

        if not self.api_key:
            logger.warning("firebase_api_key_missing", msg="FIREBASE_API_KEY not configured")

    async def sign_in_with_password(self, email: str, password: str) -> dict[str, Any]:
        return await self._post(
            f"{self.auth_url}/accounts:signInWithPassword",
            json={"email": email, "password": password, "returnSecureToken": True},
        )

    async def sign_up(self, email: str, password: str) -> dict[str, Any]:
        return await self._post(
            f"{self.auth_url}/accounts:signUp",
            json={"email": email, "password": password, "returnSecureToken": True},
        )

    async def lookup(self, id_token: str) -> dict[str, Any]:
        return await self._post(f"{self.auth_url}/accounts:lookup", json={"idToken": id_token})

    async def delete(self, id_token: str) -> dict[str, Any]:
        return await self._post(f"{self.auth_url}/accounts:delete", json={"idToken": id_token})

    async def refresh(self, refresh_token: str) -> dict[str, Any]:
        return await self._post(
            f"{self.token_url}/token",
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
        )

    async def _post(
        self,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=json, data=data)
        except httpx.TimeoutException as exc:
            await logger.awarning("firebase_auth_timeout", url=url)
            raise FirebaseAuthError("Firebase: Error (auth/timeout).", code="TIMEOUT") from exc
        except httpx.RequestError as exc:
            await logger.awarning("firebase_auth_request_error", url=url, error=str(exc))
            raise FirebaseAuthError(
                "Firebase: Error (auth/network-request-failed).", code="NETWORK"
            ) from exc

        if response.status_code == 200:
            return response.json()

        try:
            code = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            code = f"HTTP_{response.status_code}"
        raise FirebaseAuthError(_error_message(code), code=code)


def _expiry(id_token: str, expires_in: str | int | None = None) -> datetime:
    if expires_in is not None:
        return datetime.now(UTC) + timedelta(seconds=int(expires_in))
    try:
        claims = jwt.decode(id_token, options={"verify_signature": False})
        return datetime.fromtimestamp(int(claims["exp"]), UTC)
    except (jwt.PyJWTError, KeyError, ValueError):
        return datetime.now(UTC)


class FirebaseIdentity:
    """Signed-in Firebase user holding its id and refresh tokens."""

    def __init__(
        self,
        uid: str,
        email: str,
        id_token: str,
        client: FirebaseAuthClient,
        *,
        refresh_token: str | None = None,
        expires_at: datetime | None = None,
    ) -> None:
        self._uid = uid
        self._email = email
        self.id_token = id_token
        self.refresh_token = refresh_token
        self.expires_at = expires_at or _expiry(id_token)
        self._client = client

    @property
    def uid(self) -> str:
        return self._uid

    @property
    def email(self) -> str:
        return self._email

    async def get_freshness_proof(self, force_refresh: bool = False) -> str:
        if not force_refresh and datetime.now(UTC) + REFRESH_MARGIN < self.expires_at:
            return self.id_token

        if not self.refresh_token:
            raise FreshnessCheckFailedError("Session expired; sign in again")

        try:
            payload = await self._client.refresh(self.refresh_token)
        except FirebaseAuthError as exc:
            raise FreshnessCheckFailedError(str(exc)) from exc

        self.id_token = payload["id_token"]
        self.refresh_token = payload.get("refresh_token", self.refresh_token)
        self.expires_at = _expiry(self.id_token, payload.get("expires_in"))
        return self.id_token

    def __repr__(self) -> str:
        return f"<FirebaseIdentity(uid={self._uid})>"


class FirebaseIdentityProvider(ListenerRegistry):
    """Identity provider delegating to Firebase Authentication."""

    def __init__(self, client: FirebaseAuthClient | None = None) -> None:
        super().__init__()
        self.client = client or FirebaseAuthClient()

    async def sign_in(self, email: str, password: str) -> FirebaseIdentity:
        await logger.ainfo("sign_in_attempt", email=email, backend="firebase")
        try:
            payload = await self.client.sign_in_with_password(email, password)
        except FirebaseAuthError as exc:
            await logger.awarning("sign_in_rejected", email=email, code=exc.code)
            raise InvalidCredentialsError(str(exc)) from exc

        identity = self._identity(payload)
        await self._set_current(identity)
        return identity

    async def sign_out(self) -> None:
        await self._set_current(None)

    async def create_account(self, email: str, password: str) -> FirebaseIdentity:
        try:
            payload = await self.client.sign_up(email, password)
        except FirebaseAuthError as exc:
            if exc.code == "EMAIL_EXISTS":
                raise AccountExistsError(str(exc)) from exc
            raise
        return self._identity(payload)

    async def delete_account(self, identity: FirebaseIdentity) -> None:
        await self.client.delete(identity.id_token)
        await logger.ainfo("account_deleted", uid=identity.uid, backend="firebase")

    async def identity_from_token(self, token: str) -> FirebaseIdentity | None:
        """Validate a presented id token with Firebase and wrap it as an identity."""
        try:
            payload = await self.client.lookup(token)
        except FirebaseAuthError as exc:
            await logger.ainfo("firebase_token_rejected", code=exc.code)
            return None

        users = payload.get("users") or []
        if not users:
            return None
        user = users[0]
        return FirebaseIdentity(user["localId"], user.get("email", ""), token, self.client)

    def _identity(self, payload: dict[str, Any]) -> FirebaseIdentity:
        return FirebaseIdentity(
            payload["localId"],
            payload.get("email", ""),
            payload["idToken"],
            self.client,
            refresh_token=payload.get("refreshToken"),
            expires_at=_expiry(payload["idToken"], payload.get("expiresIn")),
        )
