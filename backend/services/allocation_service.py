"""Reservation creation, conflict detection and room occupancy bookkeeping."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Optional

from backend.domain.constraints import OperatingCalendar, validate_operating_calendar
from backend.domain.errors import (
    InvalidReservationError,
    RejectionReason,
    ReservationAccessError,
    ReservationConflictError,
    ReservationNotFoundError,
    ResourceNotFoundError,
)
from backend.domain.models import AvailabilitySlot, Reservation, ReservationStatus, Room
from backend.domain.quota import OneBookingPerDayPolicy, QuotaPolicy
from backend.repository.base import Repository
from backend.services.availability_service import AvailabilityService
from backend.services.locking import ResourceLockRegistry
from backend.utils.logger import get_logger


logger = get_logger(__name__)

Clock = Callable[[], datetime]


class AllocationService:
    """Single logical allocator over one catalog and one reservation store.

    Every mutating call holds the room lock for the whole
    check-then-write unit; the first writer wins a contested slot and later
    writers fail with SLOT_ALREADY_BOOKED instead of queuing.
    """

    def __init__(
        self,
        repository: Repository,
        *,
        calendar: Optional[OperatingCalendar] = None,
        quota_policy: Optional[QuotaPolicy] = None,
        moderation_enabled: bool = True,
        occupancy_window: timedelta = timedelta(hours=24),
        clock: Clock = datetime.now,
        locks: Optional[ResourceLockRegistry] = None,
        availability_service: Optional[AvailabilityService] = None,
    ) -> None:
        self._repository = repository
        self._calendar = calendar or OperatingCalendar()
        validate_operating_calendar(self._calendar)
        self._quota_policy = quota_policy or OneBookingPerDayPolicy()
        self._moderation_enabled = moderation_enabled
        self._occupancy_window = occupancy_window
        self._clock = clock
        self._locks = locks or ResourceLockRegistry()
        self._availability_service = availability_service or AvailabilityService(
            catalog=repository,
            store=repository,
            calendar=self._calendar,
        )

    @property
    def repository(self) -> Repository:
        return self._repository

    @property
    def locks(self) -> ResourceLockRegistry:
        return self._locks

    @property
    def moderation_enabled(self) -> bool:
        return self._moderation_enabled

    def now(self) -> datetime:
        return self._clock()

    def require_room(self, room_id: str) -> Room:
        room = self._repository.get_room(room_id)
        if room is None:
            raise ResourceNotFoundError(f"Room {room_id} not found")
        return room

    def require_reservation(self, reservation_id: str) -> Reservation:
        reservation = self._repository.get_reservation(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    def ensure_slot_free(self, candidate: Reservation) -> None:
        """Raise SLOT_ALREADY_BOOKED if an approved booking overlaps `candidate`."""
        conflicts = [
            existing
            for existing in self._repository.list_overlapping(
                candidate.room_id,
                candidate.start,
                candidate.end,
                statuses=(ReservationStatus.APPROVED,),
            )
            if existing.reservation_id != candidate.reservation_id
            and existing.conflicts_with(candidate)
        ]
        if conflicts:
            raise ReservationConflictError(
                "Time slot already booked",
                RejectionReason.SLOT_ALREADY_BOOKED,
            )

    def ensure_within_quota(self, candidate: Reservation) -> None:
        """Run the quota policy against the requester's other reservations."""
        held = [
            reservation
            for reservation in self._repository.list_reservations_for_requester(
                candidate.requester_id
            )
            if reservation.reservation_id != candidate.reservation_id
        ]
        self._quota_policy.check(candidate, held)

    def mark_room_occupied(self, room_id: str) -> None:
        room = self._repository.get_room(room_id)
        if room is None or room.is_under_maintenance():
            return
        room.mark_occupied()
        self._repository.save_room(room)

    def refresh_room_occupancy(self, room_id: str) -> None:
        """Recompute AVAILABLE/OCCUPIED from approved bookings in the next window.

        Rooms under maintenance keep that state until an administrator
        clears it.
        """
        room = self._repository.get_room(room_id)
        if room is None or room.is_under_maintenance():
            return
        now = self.now()
        active = self._repository.list_overlapping(
            room_id,
            now,
            now + self._occupancy_window,
            statuses=(ReservationStatus.APPROVED,),
        )
        if active:
            room.mark_occupied()
        else:
            room.mark_available()
        self._repository.save_room(room)
        logger.info("Room %s occupancy refreshed to %s", room_id, room.status.value)

    def create_reservation(
        self,
        requester_id: str,
        requester_name: str,
        room_id: str,
        start: datetime,
        end: datetime,
    ) -> Reservation:
        if not requester_id or not requester_id.strip():
            raise InvalidReservationError(
                "An authenticated requester id is required",
                RejectionReason.MISSING_REQUESTER,
            )
        if not requester_name or not requester_name.strip():
            raise InvalidReservationError(
                "A requester display name is required",
                RejectionReason.MISSING_REQUESTER,
            )

        # Locks are only created for catalog rooms.
        self.require_room(room_id)
        with self._locks.hold(room_id, requester_id=requester_id):
            room = self.require_room(room_id)
            try:
                candidate = Reservation.create(
                    room_id=room_id,
                    requester_id=requester_id,
                    requester_name=requester_name,
                    start=start,
                    end=end,
                    now=self.now(),
                    calendar=self._calendar,
                )
                if room.is_under_maintenance():
                    raise ReservationConflictError(
                        f"Room {room_id} is under maintenance",
                        RejectionReason.RESOURCE_UNDER_MAINTENANCE,
                    )
                self.ensure_within_quota(candidate)
                self.ensure_slot_free(candidate)
            except (InvalidReservationError, ReservationConflictError) as exc:
                logger.info(
                    "Rejected reservation request requester=%s room=%s reason=%s",
                    requester_id,
                    room_id,
                    exc.reason.value if exc.reason else "UNKNOWN",
                )
                raise

            if not self._moderation_enabled:
                candidate.approve()
            self._repository.save_reservation(candidate)
            if candidate.is_active():
                self.mark_room_occupied(room_id)

        logger.info(
            "Created reservation %s requester=%s room=%s %s-%s status=%s",
            candidate.reservation_id,
            requester_id,
            room_id,
            start.isoformat(),
            end.isoformat(),
            candidate.status.value,
        )
        return candidate

    def cancel_reservation(self, reservation_id: str, requester_id: str) -> Reservation:
        room_id = self.require_reservation(reservation_id).room_id
        with self._locks.hold(room_id):
            reservation = self.require_reservation(reservation_id)
            if reservation.requester_id != requester_id:
                raise ReservationAccessError(
                    "Unauthorized: reservation belongs to another requester"
                )
            reservation.cancel()
            self._repository.save_reservation(reservation)
            self.refresh_room_occupancy(reservation.room_id)
        logger.info("Reservation %s cancelled by %s", reservation_id, requester_id)
        return reservation

    def get_reservation(self, reservation_id: str) -> Reservation:
        return self.require_reservation(reservation_id)

    def list_reservations_for_requester(self, requester_id: str) -> list[Reservation]:
        return self._repository.list_reservations_for_requester(requester_id)

    def list_all_reservations(self) -> list[Reservation]:
        return self._repository.list_reservations()

    def get_available_slots(self, room_id: str, target_date: date) -> list[AvailabilitySlot]:
        return self._availability_service.slots_for(room_id, target_date)
