"""Per-requester booking limits, selectable without touching conflict detection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from backend.domain.errors import RejectionReason, ReservationConflictError
from backend.domain.models import Reservation


QUOTA_ONE_PER_DAY = "one_per_day"
QUOTA_MAX_ACTIVE = "max_active"
QUOTA_BOTH = "both"


class QuotaPolicy(ABC):
    """Strategy consulted by the allocation engine before the slot check."""

    @abstractmethod
    def check(self, candidate: Reservation, held: Sequence[Reservation]) -> None:
        """Raise ReservationConflictError if `candidate` would exceed the quota.

        `held` is every stored reservation of the candidate's requester.
        """


class OneBookingPerDayPolicy(QuotaPolicy):
    def check(self, candidate: Reservation, held: Sequence[Reservation]) -> None:
        target_day = candidate.start.date()
        for reservation in held:
            if reservation.holds_slot() and reservation.start.date() == target_day:
                raise ReservationConflictError(
                    "You can only book one room per day",
                    RejectionReason.ONE_BOOKING_PER_DAY,
                )


class MaxActiveReservationsPolicy(QuotaPolicy):
    def __init__(self, limit: int = 2) -> None:
        if limit <= 0:
            raise ValueError("limit must be > 0")
        self._limit = limit

    def check(self, candidate: Reservation, held: Sequence[Reservation]) -> None:
        active_count = sum(1 for reservation in held if reservation.holds_slot())
        if active_count >= self._limit:
            raise ReservationConflictError(
                f"You can hold at most {self._limit} active bookings",
                RejectionReason.ACTIVE_BOOKING_LIMIT,
            )


class CompositeQuotaPolicy(QuotaPolicy):
    """Applies each policy in order; the first failure wins."""

    def __init__(self, policies: Sequence[QuotaPolicy]) -> None:
        self._policies = tuple(policies)

    def check(self, candidate: Reservation, held: Sequence[Reservation]) -> None:
        for policy in self._policies:
            policy.check(candidate, held)


def build_quota_policy(name: str, max_active_reservations: int = 2) -> QuotaPolicy:
    normalized = name.strip().lower()
    if normalized == QUOTA_ONE_PER_DAY:
        return OneBookingPerDayPolicy()
    if normalized == QUOTA_MAX_ACTIVE:
        return MaxActiveReservationsPolicy(max_active_reservations)
    if normalized == QUOTA_BOTH:
        return CompositeQuotaPolicy(
            [
                OneBookingPerDayPolicy(),
                MaxActiveReservationsPolicy(max_active_reservations),
            ]
        )
    raise ValueError(
        f"Unknown quota policy {name!r}; expected one of "
        f"{QUOTA_ONE_PER_DAY}, {QUOTA_MAX_ACTIVE}, {QUOTA_BOTH}"
    )
