"""HTTP controller layer for the room catalog and availability grid."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.controllers.dependencies import (
    get_allocation_service,
    get_catalog_service,
    to_http_exception,
)
from backend.controllers.schemas import RoomResponse, SlotResponse
from backend.domain.errors import ReservationError
from backend.services.allocation_service import AllocationService
from backend.services.catalog_service import CatalogService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("", response_model=list[RoomResponse], status_code=status.HTTP_200_OK)
async def list_rooms(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> list[RoomResponse]:
    return [RoomResponse.from_domain(room) for room in catalog_service.list_rooms()]


@router.get("/{room_id}", response_model=RoomResponse, status_code=status.HTTP_200_OK)
async def get_room(
    room_id: str,
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> RoomResponse:
    try:
        return RoomResponse.from_domain(catalog_service.get_room(room_id))
    except ReservationError as exc:
        raise to_http_exception(exc) from exc


@router.get(
    "/{room_id}/availability",
    response_model=list[SlotResponse],
    status_code=status.HTTP_200_OK,
)
async def get_availability(
    room_id: str,
    target_date: date = Query(alias="date"),
    allocation_service: AllocationService = Depends(get_allocation_service),
) -> list[SlotResponse]:
    try:
        slots = allocation_service.get_available_slots(room_id, target_date)
        return [SlotResponse.from_domain(slot) for slot in slots]
    except ReservationError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected availability lookup failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load availability",
        ) from exc
