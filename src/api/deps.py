from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from functools import lru_cache

import structlog
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from src.core.auth import Role
from src.core.config import get_settings
from src.domain import Principal, Route
from src.domain.errors import (
    FreshnessCheckFailedError,
    NoAccountError,
    PendingApprovalError,
    RoleLookupError,
)
from src.domain.ports import DocumentStore, Identity, IdentityProvider, SignOutMarker
from src.domain.services.catalog import CatalogService
from src.domain.services.role_resolver import RoleResolver, ensure_eligible
from src.domain.services.session_bootstrap import SessionBootstrap
from src.domain.services.staff import StaffService
from src.infrastructure.db.session import get_session_factory
from src.infrastructure.identity.local import LocalIdentityProvider
from src.infrastructure.repositories.documents import SqlDocumentStore
from src.infrastructure.session_marker import LocalSignOutMarker, RedisSignOutMarker
from src.libs.firebase_auth import FirebaseIdentityProvider
from src.libs.firestore_client import FirestoreDocumentStore

logger = structlog.get_logger()
bearer_scheme = HTTPBearer(auto_error=False)


class ResponseNavigator:
    """Records the navigation requested by the session bootstrap.

    The API reports it to the client, which performs the actual page replace.
    """

    def __init__(self) -> None:
        self.destination: Route | None = None
        self.replace = True

    def navigate(self, destination: Route, *, replace: bool = True) -> None:
        self.destination = destination
        self.replace = replace


@lru_cache
def get_document_store() -> DocumentStore:
    settings = get_settings()
    if settings.document_backend == "firestore":
        return FirestoreDocumentStore()
    return SqlDocumentStore(get_session_factory())


def get_identity_provider() -> IdentityProvider:
    """Build a provider for the current request; subscriptions do not outlive it."""
    settings = get_settings()
    if settings.identity_backend == "firebase":
        return FirebaseIdentityProvider()
    return LocalIdentityProvider(get_session_factory())


@lru_cache
def get_redis() -> Redis:
    return Redis.from_url(get_settings().redis_url, decode_responses=True)


def get_role_resolver(store: DocumentStore = Depends(get_document_store)) -> RoleResolver:  # noqa: B008
    return RoleResolver(store)


def get_sign_out_marker(
    x_session_id: str | None = Header(default=None),
    redis: Redis = Depends(get_redis),  # noqa: B008
) -> SignOutMarker:
    if not x_session_id:
        return LocalSignOutMarker()
    return RedisSignOutMarker(
        redis, x_session_id, ttl_seconds=get_settings().signout_marker_ttl_seconds
    )


def get_navigator() -> ResponseNavigator:
    return ResponseNavigator()


def get_session_bootstrap(
    provider: IdentityProvider = Depends(get_identity_provider),  # noqa: B008
    resolver: RoleResolver = Depends(get_role_resolver),  # noqa: B008
    navigator: ResponseNavigator = Depends(get_navigator),  # noqa: B008
    marker: SignOutMarker = Depends(get_sign_out_marker),  # noqa: B008
) -> SessionBootstrap:
    return SessionBootstrap(provider, resolver, navigator, marker)


def get_staff_service(
    store: DocumentStore = Depends(get_document_store),  # noqa: B008
    provider: IdentityProvider = Depends(get_identity_provider),  # noqa: B008
) -> StaffService:
    return StaffService(store, provider)


def get_catalog_service(store: DocumentStore = Depends(get_document_store)) -> CatalogService:  # noqa: B008
    return CatalogService(store)


async def get_bearer_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    provider: IdentityProvider = Depends(get_identity_provider),  # noqa: B008
) -> Identity | None:
    """Identity presented by the client, or None when no usable token was sent."""
    if credentials is None:
        return None
    return await provider.identity_from_token(credentials.credentials)


async def get_current_identity(
    identity: Identity | None = Depends(get_bearer_identity),  # noqa: B008
) -> Identity:
    if identity is None:
        raise _unauthorized("Missing or invalid bearer token")

    try:
        await identity.get_freshness_proof(force_refresh=False)
    except FreshnessCheckFailedError as exc:
        raise _unauthorized(str(exc)) from exc
    return identity


def require_roles(
    required_roles: Sequence[Role],
) -> Callable[..., Awaitable[Principal]]:
    """Dependency factory requiring an approved role from ``required_roles``."""
    required = {role.value for role in required_roles}

    async def dependency(
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        resolver: RoleResolver = Depends(get_role_resolver),  # noqa: B008
    ) -> Principal:
        try:
            resolution = ensure_eligible(await resolver.resolve(identity))
        except (NoAccountError, PendingApprovalError) as exc:
            raise _forbidden(str(exc)) from exc
        except RoleLookupError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
            ) from exc

        if resolution.role not in required:
            await logger.awarning(
                "role_forbidden", uid=identity.uid, role=resolution.role, required=sorted(required)
            )
            raise _forbidden("Insufficient role privileges")

        return Principal(uid=identity.uid, email=identity.email, role=resolution.role)

    return dependency


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
