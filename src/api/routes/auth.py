"""Session routes - credential submission, session check on load, sign-out."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from src.api.deps import (
    ResponseNavigator,
    get_bearer_identity,
    get_identity_provider,
    get_navigator,
    get_session_bootstrap,
)
from src.api.schemas.auth import LoginRequest, LogoutResponse, SessionResponse
from src.domain import ResolutionOutcome, Route, SessionState
from src.domain.ports import Identity, IdentityProvider
from src.domain.services.session_bootstrap import SessionBootstrap

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Submit credentials",
    description=(
        "Sign in with email and password, resolve the account's role and return the "
        "dashboard to navigate to. Rejections carry a user-facing message."
    ),
)
async def login(
    payload: LoginRequest,
    bootstrap: SessionBootstrap = Depends(get_session_bootstrap),
    provider: IdentityProvider = Depends(get_identity_provider),
    navigator: ResponseNavigator = Depends(get_navigator),
) -> SessionResponse:
    """Run the credential-submission entry point."""
    outcome = await bootstrap.submit_credentials(payload.email, payload.password)

    if outcome.state is SessionState.REDIRECTING:
        identity = provider.current_identity()
        id_token = await identity.get_freshness_proof() if identity is not None else None
        return SessionResponse.from_outcome(
            outcome, replace=navigator.replace, id_token=id_token
        )

    resolution = outcome.resolution
    if resolution is None:
        status_code = status.HTTP_401_UNAUTHORIZED
    elif resolution.outcome is ResolutionOutcome.PENDING_APPROVAL:
        status_code = status.HTTP_403_FORBIDDEN
    elif resolution.outcome is ResolutionOutcome.NO_ACCOUNT:
        status_code = status.HTTP_404_NOT_FOUND
    else:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    raise HTTPException(status_code=status_code, detail=outcome.message)


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Check session on load",
    description=(
        "Resolve the bearer identity (if any) the way a page load does. Never "
        "attaches messages; clients stay on the login surface unless redirecting."
    ),
)
async def session_check(
    identity: Identity | None = Depends(get_bearer_identity),
    provider: IdentityProvider = Depends(get_identity_provider),
    bootstrap: SessionBootstrap = Depends(get_session_bootstrap),
    navigator: ResponseNavigator = Depends(get_navigator),
) -> SessionResponse:
    """Run the identity-change entry point for the presented identity."""
    await provider.restore_session(identity)
    outcome = await bootstrap.start()
    bootstrap.stop()
    return SessionResponse.from_outcome(outcome, replace=navigator.replace)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Sign out",
    description="End the session and mark it so the next load skips role resolution.",
)
async def logout(
    identity: Identity | None = Depends(get_bearer_identity),
    provider: IdentityProvider = Depends(get_identity_provider),
    bootstrap: SessionBootstrap = Depends(get_session_bootstrap),
) -> LogoutResponse:
    await provider.restore_session(identity)
    await bootstrap.sign_out()
    await logger.ainfo("signed_out", uid=identity.uid if identity else None)
    return LogoutResponse(redirect_to=Route.LOGIN.value)
