"""Staff onboarding routes - registration and admin approval."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from src.api.deps import get_staff_service, require_roles
from src.api.schemas.staff import (
    StaffListResponse,
    StaffMemberResponse,
    StaffRegisterRequest,
    StaffRegisterResponse,
    StaffRole,
)
from src.core.auth import Role
from src.domain import Principal
from src.domain.errors import AccountExistsError, StaffRecordNotFoundError
from src.domain.services.staff import StaffService

router = APIRouter(prefix="/staff", tags=["staff"])
admin_only = require_roles([Role.ADMIN])


@router.post(
    "/{role}/register",
    response_model=StaffRegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register staff member",
    description="Create a staff account whose record stays pending until an admin approves it.",
)
async def register_staff(
    role: StaffRole,
    payload: StaffRegisterRequest,
    service: StaffService = Depends(get_staff_service),
) -> StaffRegisterResponse:
    try:
        member = await service.register(
            role.value,
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
            profile=payload.profile(),
        )
    except AccountExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return StaffRegisterResponse(
        message=(
            f"{role.value.capitalize()} registration successful! "
            "Your application is pending admin approval."
        ),
        member=StaffMemberResponse.from_member(member),
    )


@router.get("/{role}", response_model=StaffListResponse, summary="List staff records")
async def list_staff(
    role: StaffRole,
    status_filter: str | None = Query(None, alias="status"),
    service: StaffService = Depends(get_staff_service),
    _: Principal = Depends(admin_only),
) -> StaffListResponse:
    members = await service.list_staff(role.value, status=status_filter)
    return StaffListResponse(members=[StaffMemberResponse.from_member(m) for m in members])


@router.post("/{role}/{uid}/approve", response_model=StaffMemberResponse)
async def approve_staff(
    role: StaffRole,
    uid: str,
    service: StaffService = Depends(get_staff_service),
    _: Principal = Depends(admin_only),
) -> StaffMemberResponse:
    try:
        member = await service.approve(role.value, uid)
    except StaffRecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return StaffMemberResponse.from_member(member)


@router.post("/{role}/{uid}/reject", response_model=StaffMemberResponse)
async def reject_staff(
    role: StaffRole,
    uid: str,
    service: StaffService = Depends(get_staff_service),
    _: Principal = Depends(admin_only),
) -> StaffMemberResponse:
    try:
        member = await service.reject(role.value, uid)
    except StaffRecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return StaffMemberResponse.from_member(member)
