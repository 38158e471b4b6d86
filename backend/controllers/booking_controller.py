"""HTTP controller layer for requester-facing booking operations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.controllers.dependencies import (
    get_allocation_service,
    require_requester,
    to_http_exception,
)
from backend.controllers.schemas import (
    CreateReservationRequest,
    MessageResponse,
    ReservationResponse,
)
from backend.domain.errors import ReservationError
from backend.services.allocation_service import AllocationService
from backend.services.auth_service import RequesterIdentity
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: CreateReservationRequest,
    requester: RequesterIdentity = Depends(require_requester),
    allocation_service: AllocationService = Depends(get_allocation_service),
) -> ReservationResponse:
    try:
        reservation = allocation_service.create_reservation(
            requester_id=requester.requester_id,
            requester_name=requester.requester_name,
            room_id=payload.room_id,
            start=payload.start_time,
            end=payload.end_time,
        )
        return ReservationResponse.from_domain(reservation)
    except ReservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected booking creation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create booking",
        ) from exc


@router.get("", response_model=list[ReservationResponse], status_code=status.HTTP_200_OK)
async def list_bookings(
    allocation_service: AllocationService = Depends(get_allocation_service),
) -> list[ReservationResponse]:
    return [
        ReservationResponse.from_domain(item)
        for item in allocation_service.list_all_reservations()
    ]


@router.get("/user", response_model=list[ReservationResponse], status_code=status.HTTP_200_OK)
async def list_user_bookings(
    requester: RequesterIdentity = Depends(require_requester),
    allocation_service: AllocationService = Depends(get_allocation_service),
) -> list[ReservationResponse]:
    return [
        ReservationResponse.from_domain(item)
        for item in allocation_service.list_reservations_for_requester(requester.requester_id)
    ]


@router.delete("/{reservation_id}", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def cancel_booking(
    reservation_id: str,
    requester: RequesterIdentity = Depends(require_requester),
    allocation_service: AllocationService = Depends(get_allocation_service),
) -> MessageResponse:
    try:
        allocation_service.cancel_reservation(reservation_id, requester.requester_id)
        return MessageResponse(message="Booking cancelled successfully")
    except ReservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected booking cancellation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to cancel booking",
        ) from exc
