"""Room catalog reads, administrative state override and summary stats."""

from __future__ import annotations

from backend.domain.models import ReservationStats, Room, RoomStatus
from backend.services.allocation_service import AllocationService
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class CatalogService:
    def __init__(self, allocation_service: AllocationService) -> None:
        self._allocation = allocation_service
        self._repository = allocation_service.repository
        self._locks = allocation_service.locks

    def list_rooms(self) -> list[Room]:
        return self._repository.list_rooms()

    def get_room(self, room_id: str) -> Room:
        return self._allocation.require_room(room_id)

    def set_room_status(self, room_id: str, status: RoomStatus) -> Room:
        """Override the operational state independently of reservations."""
        self._allocation.require_room(room_id)
        with self._locks.hold(room_id):
            room = self._allocation.require_room(room_id)
            previous = room.status
            room.apply_status(RoomStatus(status))
            self._repository.save_room(room)
        logger.info(
            "Room %s status overridden %s -> %s",
            room_id,
            previous.value,
            room.status.value,
        )
        return room

    def get_stats(self) -> ReservationStats:
        reservations = self._repository.list_reservations()
        rooms = self._repository.list_rooms()
        return ReservationStats(
            total_bookings=len(reservations),
            active_bookings=sum(1 for item in reservations if item.is_active()),
            pending_bookings=sum(1 for item in reservations if item.is_pending()),
            total_rooms=len(rooms),
            available_rooms=sum(1 for room in rooms if room.is_available()),
        )
