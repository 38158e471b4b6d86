"""Controller layer for admin moderation and catalog override endpoints."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import (
    get_allocation_service,
    get_auth_service,
    get_catalog_service,
    get_moderation_service,
    require_admin,
    to_http_exception,
)
from backend.controllers.schemas import (
    MessageResponse,
    ReservationResponse,
    RoomResponse,
    RoomStatusUpdateRequest,
    StatsResponse,
)
from backend.domain.errors import ReservationError
from backend.domain.models import Reservation
from backend.services.allocation_service import AllocationService
from backend.services.auth_service import (
    AdminTokenNotConfiguredError,
    AuthService,
    InvalidAdminTokenError,
)
from backend.services.catalog_service import CatalogService
from backend.services.moderation_service import ModerationService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class LoginRequest(BaseModel):
    admin_token: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


def _moderate(
    action: Callable[[str], Reservation],
    reservation_id: str,
    failure_detail: str,
) -> Reservation:
    try:
        return action(reservation_id)
    except ReservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected moderation failure for %s", reservation_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_detail,
        ) from exc


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    try:
        bearer = auth_service.login(payload.admin_token)
        return LoginResponse(access_token=bearer)
    except (AdminTokenNotConfiguredError, InvalidAdminTokenError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def logout(
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth_service.logout()
    return MessageResponse(message="Logged out")


@router.get(
    "/bookings",
    response_model=list[ReservationResponse],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def list_all_bookings(
    allocation_service: AllocationService = Depends(get_allocation_service),
) -> list[ReservationResponse]:
    return [
        ReservationResponse.from_domain(item)
        for item in allocation_service.list_all_reservations()
    ]


@router.get(
    "/stats",
    response_model=StatsResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def get_stats(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> StatsResponse:
    return StatsResponse.from_domain(catalog_service.get_stats())


@router.patch(
    "/rooms/{room_id}/status",
    response_model=RoomResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def update_room_status(
    room_id: str,
    payload: RoomStatusUpdateRequest,
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> RoomResponse:
    try:
        return RoomResponse.from_domain(catalog_service.set_room_status(room_id, payload.status))
    except ReservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected failure updating room %s status", room_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update room status",
        ) from exc


@router.post(
    "/bookings/{reservation_id}/approve",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def approve_booking(
    reservation_id: str,
    moderation_service: ModerationService = Depends(get_moderation_service),
) -> ReservationResponse:
    reservation = _moderate(moderation_service.approve, reservation_id, "Failed to approve booking")
    return ReservationResponse.from_domain(reservation)


@router.post(
    "/bookings/{reservation_id}/reject",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def reject_booking(
    reservation_id: str,
    moderation_service: ModerationService = Depends(get_moderation_service),
) -> ReservationResponse:
    reservation = _moderate(moderation_service.reject, reservation_id, "Failed to reject booking")
    return ReservationResponse.from_domain(reservation)


@router.post(
    "/bookings/{reservation_id}/reapprove",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def reopen_booking(
    reservation_id: str,
    moderation_service: ModerationService = Depends(get_moderation_service),
) -> ReservationResponse:
    reservation = _moderate(moderation_service.reopen, reservation_id, "Failed to reopen booking")
    return ReservationResponse.from_domain(reservation)


@router.post(
    "/bookings/{reservation_id}/complete",
    response_model=ReservationResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def complete_booking(
    reservation_id: str,
    moderation_service: ModerationService = Depends(get_moderation_service),
) -> ReservationResponse:
    reservation = _moderate(
        moderation_service.complete, reservation_id, "Failed to complete booking"
    )
    return ReservationResponse.from_domain(reservation)


@router.delete(
    "/bookings/{reservation_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin)],
)
async def delete_booking(
    reservation_id: str,
    moderation_service: ModerationService = Depends(get_moderation_service),
) -> MessageResponse:
    _moderate(moderation_service.delete, reservation_id, "Failed to delete booking")
    return MessageResponse(message="Booking deleted successfully")
