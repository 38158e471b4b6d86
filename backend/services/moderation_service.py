"""Administrative lifecycle operations layered on the allocation engine."""

from __future__ import annotations

from backend.domain.models import Reservation
from backend.services.allocation_service import AllocationService
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class ModerationService:
    """Approve/reject/delete/reopen/complete; privilege checks live in the caller."""

    def __init__(self, allocation_service: AllocationService) -> None:
        self._allocation = allocation_service
        self._repository = allocation_service.repository
        self._locks = allocation_service.locks

    def _room_of(self, reservation_id: str) -> str:
        return self._allocation.require_reservation(reservation_id).room_id

    def approve(self, reservation_id: str) -> Reservation:
        pending = self._allocation.require_reservation(reservation_id)
        with self._locks.hold(pending.room_id, requester_id=pending.requester_id):
            reservation = self._allocation.require_reservation(reservation_id)
            reservation.approve()
            # A reopened request may now collide with the requester's later bookings.
            self._allocation.ensure_within_quota(reservation)
            # A pending request may have been overtaken by another approval.
            self._allocation.ensure_slot_free(reservation)
            self._repository.save_reservation(reservation)
            self._allocation.mark_room_occupied(reservation.room_id)
        logger.info("Reservation %s approved", reservation_id)
        return reservation

    def reject(self, reservation_id: str) -> Reservation:
        with self._locks.hold(self._room_of(reservation_id)):
            reservation = self._allocation.require_reservation(reservation_id)
            reservation.reject()
            self._repository.save_reservation(reservation)
        logger.info("Reservation %s rejected", reservation_id)
        return reservation

    def delete(self, reservation_id: str) -> Reservation:
        """Hard-remove the record; returns the last stored state."""
        with self._locks.hold(self._room_of(reservation_id)):
            reservation = self._allocation.require_reservation(reservation_id)
            self._repository.delete_reservation(reservation_id)
            self._allocation.refresh_room_occupancy(reservation.room_id)
        logger.info("Reservation %s deleted", reservation_id)
        return reservation

    def reopen(self, reservation_id: str) -> Reservation:
        with self._locks.hold(self._room_of(reservation_id)):
            reservation = self._allocation.require_reservation(reservation_id)
            reservation.reopen()
            self._repository.save_reservation(reservation)
        logger.info("Reservation %s reopened for moderation", reservation_id)
        return reservation

    def complete(self, reservation_id: str) -> Reservation:
        with self._locks.hold(self._room_of(reservation_id)):
            reservation = self._allocation.require_reservation(reservation_id)
            reservation.complete()
            self._repository.save_reservation(reservation)
            self._allocation.refresh_room_occupancy(reservation.room_id)
        logger.info("Reservation %s completed", reservation_id)
        return reservation
