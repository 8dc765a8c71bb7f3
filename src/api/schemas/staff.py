from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, EmailStr, Field
from src.domain import StaffMember


class StaffRole(str, Enum):
    WAITER = "waiter"
    CHEF = "chef"
    CASHIER = "cashier"


class StaffRegisterRequest(BaseModel):
    """Self-registration form for waiters, chefs and cashiers."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=64)
    last_name: str = Field(..., min_length=1, max_length=64)
    phone: str | None = Field(None, max_length=32)
    experience: str | None = None
    skills: list[str] | None = None
    preferred_shift: str | None = None

    def profile(self) -> dict[str, Any]:
        profile: dict[str, Any] = {}
        if self.phone:
            profile["phone"] = self.phone
        if self.experience:
            profile["experience"] = self.experience
        if self.skills:
            profile["skills"] = self.skills
        if self.preferred_shift:
            profile["preferredShift"] = self.preferred_shift
        return profile


class StaffMemberResponse(BaseModel):
    uid: str
    role: str
    email: str
    status: str
    approval: bool
    first_name: str
    last_name: str
    created_at: datetime
    profile: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_member(cls, member: StaffMember) -> StaffMemberResponse:
        return cls(
            uid=member.uid,
            role=member.role,
            email=member.email,
            status=member.status,
            approval=member.approval,
            first_name=member.first_name,
            last_name=member.last_name,
            created_at=member.created_at,
            profile=member.profile,
        )


class StaffRegisterResponse(BaseModel):
    message: str
    member: StaffMemberResponse


class StaffListResponse(BaseModel):
    members: list[StaffMemberResponse]
