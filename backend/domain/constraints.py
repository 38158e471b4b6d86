"""Domain-level eligibility rules for reservation requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from backend.domain.errors import InvalidReservationError, RejectionReason


SECONDS_PER_HOUR = 3600


@dataclass(frozen=True)
class OperatingCalendar:
    open_hour: int = 7
    close_hour: int = 21
    allowed_durations_hours: tuple[int, ...] = (1, 2)
    min_advance_days: int = 1

    @property
    def slot_count(self) -> int:
        return self.close_hour - self.open_hour


def validate_operating_calendar(calendar: OperatingCalendar) -> None:
    if not 0 <= calendar.open_hour < calendar.close_hour <= 24:
        raise ValueError("open_hour must be < close_hour and both within 0..24")
    if not calendar.allowed_durations_hours:
        raise ValueError("allowed_durations_hours must not be empty")
    if any(hours <= 0 for hours in calendar.allowed_durations_hours):
        raise ValueError("allowed_durations_hours values must be > 0")
    if calendar.min_advance_days < 0:
        raise ValueError("min_advance_days must be >= 0")


def duration_in_hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_HOUR


def validate_reservation_window(
    start: datetime,
    end: datetime,
    *,
    now: datetime,
    calendar: OperatingCalendar,
) -> None:
    """Raise InvalidReservationError unless [start, end) is bookable at `now`.

    Rules are checked in a fixed order and the first failure wins, so the
    reason code is deterministic for a given request.
    """
    if end <= start:
        raise InvalidReservationError(
            "End time must be after start time",
            RejectionReason.NON_POSITIVE_DURATION,
        )

    if duration_in_hours(start, end) not in calendar.allowed_durations_hours:
        allowed = " or ".join(str(hours) for hours in calendar.allowed_durations_hours)
        raise InvalidReservationError(
            f"Booking must be {allowed} hours",
            RejectionReason.BAD_DURATION,
        )

    if not calendar.open_hour <= start.hour < calendar.close_hour:
        raise InvalidReservationError(
            f"Bookings only start between {calendar.open_hour}:00 and {calendar.close_hour}:00",
            RejectionReason.OUTSIDE_OPERATING_HOURS,
        )

    earliest_date = now.date() + timedelta(days=calendar.min_advance_days)
    if start.date() < earliest_date:
        raise InvalidReservationError(
            f"Must book at least {calendar.min_advance_days} day(s) in advance",
            RejectionReason.INSUFFICIENT_NOTICE,
        )
