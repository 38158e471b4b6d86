from __future__ import annotations

from datetime import date, datetime

import pytest

from backend.domain.errors import ResourceNotFoundError
from backend.domain.models import AvailabilitySlot
from backend.repository.memory_repository import InMemoryRepository
from backend.services.allocation_service import AllocationService
from backend.services.availability_service import format_slot_label
from backend.services.moderation_service import ModerationService


NOW = datetime(2026, 1, 10, 14, 0)
TARGET = date(2026, 1, 12)


def _build() -> tuple[AllocationService, ModerationService]:
    repository = InMemoryRepository()
    repository.seed_default_rooms()
    allocation = AllocationService(repository, clock=lambda: NOW)
    return allocation, ModerationService(allocation)


def test_empty_day_is_fully_available() -> None:
    allocation, _ = _build()

    slots = allocation.get_available_slots("room-a", TARGET)

    assert len(slots) == 14
    assert [slot.start_hour for slot in slots] == list(range(7, 21))
    assert all(slot.is_available for slot in slots)
    assert slots[0].display_label == "7:00 AM - 8:00 AM"
    assert slots[-1].display_label == "8:00 PM - 9:00 PM"


def test_approved_two_hour_booking_blocks_two_slots() -> None:
    allocation, moderation = _build()
    reservation = allocation.create_reservation(
        "u1", "User One", "room-a", datetime(2026, 1, 12, 10), datetime(2026, 1, 12, 12)
    )
    moderation.approve(reservation.reservation_id)

    slots = {slot.start_hour: slot.is_available for slot in allocation.get_available_slots("room-a", TARGET)}

    assert slots[9] is True
    assert slots[10] is False
    assert slots[11] is False
    assert slots[12] is True


def test_pending_booking_leaves_slot_free() -> None:
    allocation, _ = _build()
    allocation.create_reservation(
        "u1", "User One", "room-a", datetime(2026, 1, 12, 10), datetime(2026, 1, 12, 11)
    )

    slots = {slot.start_hour: slot.is_available for slot in allocation.get_available_slots("room-a", TARGET)}

    assert slots[10] is True


def test_other_rooms_and_days_are_unaffected() -> None:
    allocation, moderation = _build()
    reservation = allocation.create_reservation(
        "u1", "User One", "room-a", datetime(2026, 1, 12, 10), datetime(2026, 1, 12, 11)
    )
    moderation.approve(reservation.reservation_id)

    assert all(slot.is_available for slot in allocation.get_available_slots("room-b", TARGET))
    assert all(slot.is_available for slot in allocation.get_available_slots("room-a", date(2026, 1, 13)))


def test_unknown_room_is_not_found() -> None:
    allocation, _ = _build()
    with pytest.raises(ResourceNotFoundError):
        allocation.get_available_slots("room-z", TARGET)


@pytest.mark.parametrize(
    ("start_hour", "end_hour", "expected"),
    [
        (0, 1, "12:00 AM - 1:00 AM"),
        (11, 12, "11:00 AM - 12:00 PM"),
        (12, 13, "12:00 PM - 1:00 PM"),
        (23, 24, "11:00 PM - 12:00 AM"),
    ],
)
def test_slot_label_folds_to_twelve_hour_clock(start_hour: int, end_hour: int, expected: str) -> None:
    assert format_slot_label(start_hour, end_hour) == expected


def test_slot_must_be_exactly_one_hour() -> None:
    with pytest.raises(ValueError):
        AvailabilitySlot(start_hour=9, end_hour=11, is_available=True, display_label="x")
