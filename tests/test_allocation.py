from __future__ import annotations

import threading
from datetime import datetime

import pytest

from backend.domain.errors import (
    InvalidReservationError,
    InvalidTransitionError,
    RejectionReason,
    ReservationAccessError,
    ReservationConflictError,
    ReservationNotFoundError,
    ResourceNotFoundError,
)
from backend.domain.models import ReservationStatus, RoomStatus
from backend.domain.quota import build_quota_policy
from backend.repository.memory_repository import InMemoryRepository
from backend.services.allocation_service import AllocationService
from backend.services.moderation_service import ModerationService


NOW = datetime(2026, 1, 10, 14, 0)
DAY = datetime(2026, 1, 12)


def _at(hour: int, minute: int = 0, day: datetime = DAY) -> datetime:
    return day.replace(hour=hour, minute=minute)


def _build_service(
    quota_policy: str = "one_per_day",
    moderation_enabled: bool = True,
) -> AllocationService:
    repository = InMemoryRepository()
    repository.seed_default_rooms()
    return AllocationService(
        repository,
        quota_policy=build_quota_policy(quota_policy, max_active_reservations=2),
        moderation_enabled=moderation_enabled,
        clock=lambda: NOW,
    )


def test_create_reservation_starts_pending() -> None:
    service = _build_service()

    reservation = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))

    assert reservation.status is ReservationStatus.PENDING
    assert reservation.created_at == NOW
    assert service.get_reservation(reservation.reservation_id) == reservation
    assert service.repository.get_room("room-a").status is RoomStatus.AVAILABLE


def test_unknown_room_is_not_found() -> None:
    service = _build_service()
    with pytest.raises(ResourceNotFoundError):
        service.create_reservation("u1", "User One", "room-z", _at(10), _at(11))


def test_validator_failures_propagate() -> None:
    service = _build_service()
    with pytest.raises(InvalidReservationError) as exc_info:
        service.create_reservation("u1", "User One", "room-a", _at(10), _at(12, 30))
    assert exc_info.value.reason is RejectionReason.BAD_DURATION
    assert service.list_all_reservations() == []


def test_missing_requester_is_rejected() -> None:
    service = _build_service()
    with pytest.raises(InvalidReservationError) as exc_info:
        service.create_reservation("  ", "Anon", "room-a", _at(10), _at(11))
    assert exc_info.value.reason is RejectionReason.MISSING_REQUESTER


def test_overlap_with_approved_booking_is_rejected() -> None:
    service = _build_service()
    moderation = ModerationService(service)
    first = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))
    moderation.approve(first.reservation_id)

    with pytest.raises(ReservationConflictError) as exc_info:
        service.create_reservation("u2", "User Two", "room-a", _at(10, 30), _at(11, 30))
    assert exc_info.value.reason is RejectionReason.SLOT_ALREADY_BOOKED


def test_adjacent_booking_does_not_conflict() -> None:
    service = _build_service()
    moderation = ModerationService(service)
    first = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))
    moderation.approve(first.reservation_id)

    second = service.create_reservation("u2", "User Two", "room-a", _at(11), _at(12))

    assert second.status is ReservationStatus.PENDING


def test_pending_bookings_do_not_block_other_requesters() -> None:
    service = _build_service()
    service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))

    second = service.create_reservation("u2", "User Two", "room-a", _at(10), _at(11))

    assert second.status is ReservationStatus.PENDING


def test_one_booking_per_day_policy() -> None:
    service = _build_service("one_per_day")
    service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))

    with pytest.raises(ReservationConflictError) as exc_info:
        service.create_reservation("u1", "User One", "room-b", _at(14), _at(15))
    assert exc_info.value.reason is RejectionReason.ONE_BOOKING_PER_DAY

    other_day = service.create_reservation(
        "u1", "User One", "room-b", _at(14, day=datetime(2026, 1, 13)), _at(15, day=datetime(2026, 1, 13))
    )
    assert other_day.status is ReservationStatus.PENDING


def test_cancelled_booking_frees_the_day_quota() -> None:
    service = _build_service("one_per_day")
    first = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))
    service.cancel_reservation(first.reservation_id, "u1")

    again = service.create_reservation("u1", "User One", "room-b", _at(14), _at(15))

    assert again.status is ReservationStatus.PENDING


def test_max_active_policy_allows_same_day_until_limit() -> None:
    service = _build_service("max_active")
    service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))
    service.create_reservation("u1", "User One", "room-b", _at(14), _at(15))

    with pytest.raises(ReservationConflictError) as exc_info:
        service.create_reservation(
            "u1", "User One", "room-c", _at(9, day=datetime(2026, 1, 20)), _at(10, day=datetime(2026, 1, 20))
        )
    assert exc_info.value.reason is RejectionReason.ACTIVE_BOOKING_LIMIT


def test_both_policies_report_day_rule_first() -> None:
    service = _build_service("both")
    service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))

    with pytest.raises(ReservationConflictError) as exc_info:
        service.create_reservation("u1", "User One", "room-b", _at(14), _at(15))
    assert exc_info.value.reason is RejectionReason.ONE_BOOKING_PER_DAY


def test_unknown_quota_policy_name_raises() -> None:
    with pytest.raises(ValueError):
        build_quota_policy("unlimited")


def test_unmoderated_workflow_approves_immediately() -> None:
    service = _build_service(moderation_enabled=False)

    reservation = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))

    assert reservation.status is ReservationStatus.APPROVED
    assert service.repository.get_room("room-a").status is RoomStatus.OCCUPIED
    with pytest.raises(ReservationConflictError):
        service.create_reservation("u2", "User Two", "room-a", _at(10), _at(11))


def test_room_under_maintenance_rejects_requests() -> None:
    service = _build_service()
    room = service.repository.get_room("room-c")
    room.set_maintenance()
    service.repository.save_room(room)

    with pytest.raises(ReservationConflictError) as exc_info:
        service.create_reservation("u1", "User One", "room-c", _at(10), _at(11))
    assert exc_info.value.reason is RejectionReason.RESOURCE_UNDER_MAINTENANCE


def test_cancel_by_other_requester_is_unauthorized_and_leaves_state() -> None:
    service = _build_service()
    reservation = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))

    with pytest.raises(ReservationAccessError):
        service.cancel_reservation(reservation.reservation_id, "u2")

    assert service.get_reservation(reservation.reservation_id).status is ReservationStatus.PENDING


def test_cancel_twice_fails_second_time() -> None:
    service = _build_service()
    reservation = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))

    cancelled = service.cancel_reservation(reservation.reservation_id, "u1")
    assert cancelled.status is ReservationStatus.CANCELLED

    with pytest.raises(InvalidTransitionError):
        service.cancel_reservation(reservation.reservation_id, "u1")


def test_cancel_unknown_reservation_is_not_found() -> None:
    service = _build_service()
    with pytest.raises(ReservationNotFoundError):
        service.cancel_reservation("missing", "u1")


def test_cancel_approved_booking_releases_room() -> None:
    service = _build_service()
    moderation = ModerationService(service)
    reservation = service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))
    moderation.approve(reservation.reservation_id)
    assert service.repository.get_room("room-a").status is RoomStatus.OCCUPIED

    service.cancel_reservation(reservation.reservation_id, "u1")

    assert service.repository.get_room("room-a").status is RoomStatus.AVAILABLE


def test_occupancy_stays_when_approved_booking_overlaps_next_day_window() -> None:
    current = {"now": NOW}
    repository = InMemoryRepository()
    repository.seed_default_rooms()
    service = AllocationService(repository, clock=lambda: current["now"])
    moderation = ModerationService(service)
    early = service.create_reservation("u1", "User One", "room-a", _at(9), _at(10))
    late = service.create_reservation("u2", "User Two", "room-a", _at(15), _at(16))
    moderation.approve(early.reservation_id)
    moderation.approve(late.reservation_id)

    current["now"] = datetime(2026, 1, 12, 8, 0)
    service.cancel_reservation(late.reservation_id, "u2")

    assert repository.get_room("room-a").status is RoomStatus.OCCUPIED


def test_listing_by_requester() -> None:
    service = _build_service()
    service.create_reservation("u1", "User One", "room-a", _at(10), _at(11))
    service.create_reservation("u2", "User Two", "room-b", _at(10), _at(11))

    mine = service.list_reservations_for_requester("u1")

    assert [item.requester_id for item in mine] == ["u1"]
    assert len(service.list_all_reservations()) == 2


def test_concurrent_unmoderated_requests_allocate_slot_once() -> None:
    service = _build_service(moderation_enabled=False)
    outcomes: list[str] = []
    barrier = threading.Barrier(8)

    def attempt(index: int) -> None:
        barrier.wait()
        try:
            service.create_reservation(f"user-{index}", f"User {index}", "room-a", _at(10), _at(11))
            outcomes.append("ok")
        except ReservationConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=attempt, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 7


def test_unknown_rooms_do_not_leave_locks_behind() -> None:
    service = _build_service()

    for index in range(50):
        with pytest.raises(ResourceNotFoundError):
            service.create_reservation("u1", "User One", f"bogus-{index}", _at(10), _at(11))

    assert service.locks.tracked_room_ids == frozenset()
