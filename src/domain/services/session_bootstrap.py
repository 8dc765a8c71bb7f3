"""Session bootstrap state machine.

Turns identity-change deliveries and credential submissions into session
states. Both entry points resolve roles through the same ``RoleResolver`` and
differ only in the feedback message attached to the outcome.
"""

from __future__ import annotations

import structlog
from src.domain.errors import AuthError, FreshnessCheckFailedError
from src.domain.models import (
    BootstrapOutcome,
    Resolution,
    ResolutionOutcome,
    Route,
    SessionState,
)
from src.domain.ports import (
    Identity,
    IdentityProvider,
    Navigator,
    SignOutMarker,
    Unsubscribe,
)
from src.domain.services.role_resolver import RoleResolver

logger = structlog.get_logger()

NO_ACCOUNT_MESSAGE = "Account not found. Please contact support."
PENDING_MESSAGE = (
    "Your {role} account is pending admin approval. "
    "Please wait for approval before logging in."
)


def pending_message(role: str) -> str:
    return PENDING_MESSAGE.format(role=role)


class SessionBootstrap:
    """Drive role resolution for one client session.

    Transitions carry the generation of the request that produced them and are
    dropped when a newer request has started since. ``REDIRECTING`` is terminal.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        resolver: RoleResolver,
        navigator: Navigator,
        sign_out_marker: SignOutMarker,
    ) -> None:
        self.identity_provider = identity_provider
        self.resolver = resolver
        self.navigator = navigator
        self.sign_out_marker = sign_out_marker
        self._outcome = BootstrapOutcome(state=SessionState.CHECKING)
        self._generation = 0
        self._submissions_in_flight = 0
        self._unsubscribe: Unsubscribe | None = None

    @property
    def state(self) -> SessionState:
        return self._outcome.state

    @property
    def outcome(self) -> BootstrapOutcome:
        return self._outcome

    async def start(self) -> BootstrapOutcome:
        """Subscribe to identity changes; the provider delivers the current identity."""
        if self._unsubscribe is None:
            self._unsubscribe = await self.identity_provider.on_identity_change(
                self.handle_identity_change
            )
        return self._outcome

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def handle_identity_change(self, identity: Identity | None) -> BootstrapOutcome:
        """Entry point for provider-driven identity changes. Never attaches messages."""
        if self.state is SessionState.REDIRECTING:
            return self._outcome

        if await self.sign_out_marker.consume():
            await logger.ainfo("session_signed_out_marker_consumed")
            generation = self._next_generation()
            return await self._transition(generation, SessionState.UNAUTHENTICATED)

        if identity is None:
            generation = self._next_generation()
            return await self._transition(generation, SessionState.UNAUTHENTICATED)

        if self._submissions_in_flight:
            await logger.ainfo("identity_change_deferred_to_submission", uid=identity.uid)
            return self._outcome

        generation = self._next_generation()
        await self._transition(generation, SessionState.CHECKING)

        try:
            await identity.get_freshness_proof(force_refresh=False)
        except FreshnessCheckFailedError as exc:
            await logger.ainfo("session_freshness_check_failed", uid=identity.uid, error=str(exc))
            return await self._transition(generation, SessionState.UNAUTHENTICATED)

        resolution = await self.resolver.resolve(identity)

        if resolution.outcome is ResolutionOutcome.ELIGIBLE:
            return await self._redirect(generation, resolution)
        if resolution.outcome is ResolutionOutcome.PENDING_APPROVAL:
            return await self._transition(
                generation, SessionState.AUTHENTICATED_PENDING, resolution=resolution
            )
        if resolution.outcome is ResolutionOutcome.ERROR:
            await logger.awarning(
                "session_resolution_error", uid=identity.uid, error=resolution.error
            )
        return await self._transition(
            generation, SessionState.UNAUTHENTICATED, resolution=resolution
        )

    async def submit_credentials(self, email: str, password: str) -> BootstrapOutcome:
        """Entry point for an explicit sign-in; attaches user-facing messages."""
        if self.state is SessionState.REDIRECTING:
            return self._outcome

        self._submissions_in_flight += 1
        try:
            try:
                identity = await self.identity_provider.sign_in(email, password)
            except AuthError as exc:
                generation = self._next_generation()
                return await self._transition(
                    generation, SessionState.UNAUTHENTICATED, message=str(exc)
                )

            generation = self._next_generation()
            resolution = await self.resolver.resolve(identity)
        finally:
            self._submissions_in_flight -= 1

        if resolution.outcome is ResolutionOutcome.ELIGIBLE:
            return await self._redirect(generation, resolution)
        if resolution.outcome is ResolutionOutcome.PENDING_APPROVAL:
            return await self._transition(
                generation,
                SessionState.AUTHENTICATED_PENDING,
                message=pending_message(resolution.role or ""),
                resolution=resolution,
            )
        if resolution.outcome is ResolutionOutcome.NO_ACCOUNT:
            return await self._transition(
                generation,
                SessionState.UNAUTHENTICATED,
                message=NO_ACCOUNT_MESSAGE,
                resolution=resolution,
            )
        return await self._transition(
            generation,
            SessionState.UNAUTHENTICATED,
            message=resolution.error,
            resolution=resolution,
        )

    async def sign_out(self) -> None:
        """Mark the session as explicitly signed out, then end the provider session."""
        await self.sign_out_marker.set()
        await self.identity_provider.sign_out()

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    async def _redirect(self, generation: int, resolution: Resolution) -> BootstrapOutcome:
        outcome = await self._transition(
            generation,
            SessionState.REDIRECTING,
            destination=resolution.destination,
            resolution=resolution,
        )
        if outcome.state is SessionState.REDIRECTING and outcome.resolution is resolution:
            self.navigator.navigate(resolution.destination, replace=True)
        return outcome

    async def _transition(
        self,
        generation: int,
        state: SessionState,
        *,
        destination: Route | None = None,
        message: str | None = None,
        resolution: Resolution | None = None,
    ) -> BootstrapOutcome:
        if self.state is SessionState.REDIRECTING:
            await logger.adebug("session_transition_after_redirect", requested=state.value)
            return self._outcome
        if generation != self._generation:
            await logger.ainfo(
                "session_transition_stale",
                requested=state.value,
                generation=generation,
                latest=self._generation,
            )
            return self._outcome

        previous = self._outcome.state
        self._outcome = BootstrapOutcome(
            state=state,
            destination=destination,
            message=message,
            resolution=resolution,
        )
        await logger.ainfo(
            "session_transition",
            previous=previous.value,
            state=state.value,
            destination=destination.value if destination else None,
        )
        return self._outcome
