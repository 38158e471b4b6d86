"""Error taxonomy raised by the reservation core."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class RejectionReason(str, Enum):
    NON_POSITIVE_DURATION = "NON_POSITIVE_DURATION"
    BAD_DURATION = "BAD_DURATION"
    OUTSIDE_OPERATING_HOURS = "OUTSIDE_OPERATING_HOURS"
    INSUFFICIENT_NOTICE = "INSUFFICIENT_NOTICE"
    MISSING_REQUESTER = "MISSING_REQUESTER"
    ONE_BOOKING_PER_DAY = "ONE_BOOKING_PER_DAY"
    ACTIVE_BOOKING_LIMIT = "ACTIVE_BOOKING_LIMIT"
    SLOT_ALREADY_BOOKED = "SLOT_ALREADY_BOOKED"
    RESOURCE_UNDER_MAINTENANCE = "RESOURCE_UNDER_MAINTENANCE"


class ReservationError(Exception):
    """Base exception for expected, caller-recoverable reservation failures."""

    def __init__(self, message: str, reason: Optional[RejectionReason] = None) -> None:
        super().__init__(message)
        self.reason = reason


class InvalidReservationError(ReservationError):
    """Raised when a request breaks a duration, hours or notice rule."""


class ReservationConflictError(ReservationError):
    """Raised when a request collides with committed bookings or a quota."""


class NotFoundError(ReservationError):
    """Raised when a referenced entity does not exist."""


class ResourceNotFoundError(NotFoundError):
    """Raised when a room id is not in the catalog."""


class ReservationNotFoundError(NotFoundError):
    """Raised when a reservation id is not in the store."""


class ReservationAccessError(ReservationError):
    """Raised when a requester acts on a reservation they do not own."""


class InvalidTransitionError(ReservationError):
    """Raised when a lifecycle operation is attempted from a disallowed status."""
