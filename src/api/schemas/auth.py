"""Pydantic schemas for session and authentication endpoints."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field
from src.domain import BootstrapOutcome, SessionState

# --- Request Schemas ---


class LoginRequest(BaseModel):
    """Request schema for credential submission."""

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, description="Account password")


# --- Response Schemas ---


class SessionResponse(BaseModel):
    """Session state reached by the session bootstrap."""

    state: SessionState = Field(..., description="Session state after resolution")
    role: str | None = Field(None, description="Resolved role, when a record was found")
    redirect_to: str | None = Field(None, description="Destination route when redirecting")
    replace: bool = Field(
        default=True, description="Navigate with a history replace rather than a push"
    )
    message: str | None = Field(None, description="User-facing feedback for the login surface")
    id_token: str | None = Field(None, description="Identity token for subsequent requests")

    @classmethod
    def from_outcome(
        cls,
        outcome: BootstrapOutcome,
        *,
        replace: bool = True,
        id_token: str | None = None,
    ) -> SessionResponse:
        return cls(
            state=outcome.state,
            role=outcome.resolution.role if outcome.resolution else None,
            redirect_to=outcome.destination.value if outcome.destination else None,
            replace=replace,
            message=outcome.message,
            id_token=id_token,
        )


class LogoutResponse(BaseModel):
    state: SessionState = Field(default=SessionState.UNAUTHENTICATED)
    redirect_to: str = Field(..., description="Route to show after signing out")
