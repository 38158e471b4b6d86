"""Domain models for rooms, reservations and derived availability slots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from backend.domain.constraints import (
    OperatingCalendar,
    duration_in_hours,
    validate_reservation_window,
)
from backend.domain.errors import InvalidTransitionError


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# action -> (allowed source statuses, target status, failure message)
_TRANSITIONS: dict[str, tuple[frozenset[ReservationStatus], ReservationStatus, str]] = {
    "approve": (
        frozenset({ReservationStatus.PENDING}),
        ReservationStatus.APPROVED,
        "Only pending reservations can be approved",
    ),
    "reject": (
        frozenset({ReservationStatus.PENDING}),
        ReservationStatus.CANCELLED,
        "Only pending reservations can be rejected",
    ),
    "cancel": (
        frozenset({ReservationStatus.PENDING, ReservationStatus.APPROVED}),
        ReservationStatus.CANCELLED,
        "Only approved or pending reservations can be cancelled",
    ),
    "complete": (
        frozenset({ReservationStatus.APPROVED}),
        ReservationStatus.COMPLETED,
        "Only approved reservations can be completed",
    ),
    "reopen": (
        frozenset({ReservationStatus.CANCELLED}),
        ReservationStatus.PENDING,
        "Only cancelled reservations can be re-approved",
    ),
}


class Room:
    """Capacity-1 bookable room; capacity is informational only."""

    def __init__(
        self,
        room_id: str,
        name: str,
        capacity: int,
        amenities: tuple[str, ...] = (),
        status: RoomStatus = RoomStatus.AVAILABLE,
    ) -> None:
        self.room_id = room_id
        self.name = name
        self.capacity = capacity
        self.amenities = tuple(amenities)
        self._status = RoomStatus(status)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Room):
            return NotImplemented
        return self.room_id == other.room_id and self._status is other._status

    def __hash__(self) -> int:
        return hash(self.room_id)

    def __repr__(self) -> str:
        return f"Room(id={self.room_id!r}, name={self.name!r}, status={self._status.value})"

    @property
    def status(self) -> RoomStatus:
        return self._status

    def is_available(self) -> bool:
        return self._status is RoomStatus.AVAILABLE

    def is_under_maintenance(self) -> bool:
        return self._status is RoomStatus.MAINTENANCE

    def mark_available(self) -> None:
        self._status = RoomStatus.AVAILABLE

    def mark_occupied(self) -> None:
        self._status = RoomStatus.OCCUPIED

    def set_maintenance(self) -> None:
        self._status = RoomStatus.MAINTENANCE

    def apply_status(self, status: RoomStatus) -> None:
        """Administrative override; routes through the named mutators."""
        if status is RoomStatus.AVAILABLE:
            self.mark_available()
        elif status is RoomStatus.OCCUPIED:
            self.mark_occupied()
        else:
            self.set_maintenance()

    def has_amenity(self, amenity: str) -> bool:
        return amenity in self.amenities


class Reservation:
    """A time-bounded claim by one requester on one room.

    Identity, room, requester and interval are fixed at construction. The
    status is only reachable through the lifecycle methods below, which
    consult the transition table and raise InvalidTransitionError otherwise.
    """

    __slots__ = (
        "_reservation_id",
        "_room_id",
        "_requester_id",
        "_requester_name",
        "_start",
        "_end",
        "_status",
        "_created_at",
    )

    def __init__(
        self,
        reservation_id: str,
        room_id: str,
        requester_id: str,
        requester_name: str,
        start: datetime,
        end: datetime,
        status: ReservationStatus = ReservationStatus.PENDING,
        created_at: Optional[datetime] = None,
    ) -> None:
        if end <= start:
            raise ValueError("Reservation end must be after start")
        self._reservation_id = reservation_id
        self._room_id = room_id
        self._requester_id = requester_id
        self._requester_name = requester_name
        self._start = start
        self._end = end
        self._status = ReservationStatus(status)
        self._created_at = created_at or datetime.now()

    @classmethod
    def create(
        cls,
        *,
        room_id: str,
        requester_id: str,
        requester_name: str,
        start: datetime,
        end: datetime,
        now: datetime,
        calendar: OperatingCalendar,
    ) -> "Reservation":
        """Build a brand-new PENDING reservation after running eligibility rules."""
        validate_reservation_window(start, end, now=now, calendar=calendar)
        return cls(
            reservation_id=str(uuid4()),
            room_id=room_id,
            requester_id=requester_id,
            requester_name=requester_name,
            start=start,
            end=end,
            status=ReservationStatus.PENDING,
            created_at=now,
        )

    @property
    def reservation_id(self) -> str:
        return self._reservation_id

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def requester_id(self) -> str:
        return self._requester_id

    @property
    def requester_name(self) -> str:
        return self._requester_name

    @property
    def start(self) -> datetime:
        return self._start

    @property
    def end(self) -> datetime:
        return self._end

    @property
    def status(self) -> ReservationStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def duration_hours(self) -> float:
        return duration_in_hours(self._start, self._end)

    def is_active(self) -> bool:
        return self._status is ReservationStatus.APPROVED

    def is_pending(self) -> bool:
        return self._status is ReservationStatus.PENDING

    def holds_slot(self) -> bool:
        return self.is_active() or self.is_pending()

    def can_extend(self) -> bool:
        return self.duration_hours() == 1 and self.is_active()

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self._start < end and self._end > start

    def conflicts_with(self, other: "Reservation") -> bool:
        return self._room_id == other.room_id and self.overlaps(other.start, other.end)

    def _transition(self, action: str) -> None:
        allowed, target, message = _TRANSITIONS[action]
        if self._status not in allowed:
            raise InvalidTransitionError(message)
        self._status = target

    def approve(self) -> None:
        self._transition("approve")

    def reject(self) -> None:
        self._transition("reject")

    def cancel(self) -> None:
        self._transition("cancel")

    def complete(self) -> None:
        self._transition("complete")

    def reopen(self) -> None:
        self._transition("reopen")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reservation):
            return NotImplemented
        return (
            self._reservation_id == other._reservation_id
            and self._status is other._status
            and self._start == other._start
            and self._end == other._end
        )

    def __hash__(self) -> int:
        return hash(self._reservation_id)

    def __repr__(self) -> str:
        return (
            f"Reservation(id={self._reservation_id!r}, room_id={self._room_id!r}, "
            f"requester_id={self._requester_id!r}, start={self._start.isoformat()}, "
            f"end={self._end.isoformat()}, status={self._status.value})"
        )


@dataclass(frozen=True)
class AvailabilitySlot:
    start_hour: int
    end_hour: int
    is_available: bool
    display_label: str

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour < 24:
            raise ValueError("start_hour must be within 0..23")
        if self.end_hour != self.start_hour + 1:
            raise ValueError("Time slot must be exactly 1 hour")


@dataclass(frozen=True)
class ReservationStats:
    total_bookings: int
    active_bookings: int
    pending_bookings: int
    total_rooms: int
    available_rooms: int
