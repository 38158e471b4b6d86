from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from backend.domain.models import Reservation, ReservationStatus, Room, RoomStatus
from backend.repository.data_repository import DataRepository, build_repository
from backend.repository.memory_repository import InMemoryRepository
from backend.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str, **overrides):
    base = get_settings()
    return replace(base, database_path=tmp_path / filename, **overrides)


def _reservation(reservation_id: str, start_hour: int, end_hour: int, **overrides) -> Reservation:
    fields = {
        "reservation_id": reservation_id,
        "room_id": "room-a",
        "requester_id": "u1",
        "requester_name": "User One",
        "start": datetime(2026, 1, 12, start_hour),
        "end": datetime(2026, 1, 12, end_hour),
        "status": ReservationStatus.APPROVED,
        "created_at": datetime(2026, 1, 10, 9, 30),
    }
    fields.update(overrides)
    return Reservation(**fields)


@pytest.fixture(params=["sqlite", "memory"])
def repository(request, tmp_path):
    if request.param == "sqlite":
        repo = DataRepository(_build_test_settings(tmp_path, "repository.db"))
    else:
        repo = InMemoryRepository()
    repo.initialize_database()
    repo.seed_default_rooms()
    return repo


def test_seed_is_idempotent(repository) -> None:
    assert len(repository.list_rooms()) == 5
    assert repository.seed_default_rooms() == 0
    room = repository.get_room("room-a")
    assert room.name == "Room A"
    assert room.has_amenity("WiFi")
    assert room.status is RoomStatus.AVAILABLE


def test_room_status_persists(repository) -> None:
    room = repository.get_room("room-b")
    room.set_maintenance()
    repository.save_room(room)

    assert repository.get_room("room-b").status is RoomStatus.MAINTENANCE


def test_reservation_fields_roundtrip(repository) -> None:
    original = _reservation("r1", 10, 11, status=ReservationStatus.PENDING)
    repository.save_reservation(original)

    loaded = repository.get_reservation("r1")

    assert loaded == original
    assert loaded.requester_name == "User One"
    assert loaded.created_at == datetime(2026, 1, 10, 9, 30)


def test_status_update_keeps_immutable_fields(repository) -> None:
    reservation = _reservation("r1", 10, 11, status=ReservationStatus.PENDING)
    repository.save_reservation(reservation)
    reservation.approve()
    repository.save_reservation(reservation)

    loaded = repository.get_reservation("r1")

    assert loaded.status is ReservationStatus.APPROVED
    assert loaded.start == datetime(2026, 1, 12, 10)


def test_overlap_filter_is_half_open(repository) -> None:
    repository.save_reservation(_reservation("r1", 10, 11))
    repository.save_reservation(_reservation("r2", 12, 14))
    repository.save_reservation(_reservation("r3", 10, 11, room_id="room-b"))
    repository.save_reservation(
        _reservation("r4", 10, 11, requester_id="u2", status=ReservationStatus.PENDING)
    )

    hits = repository.list_overlapping("room-a", datetime(2026, 1, 12, 11), datetime(2026, 1, 12, 13))
    assert [item.reservation_id for item in hits] == ["r2"]

    with_pending = repository.list_overlapping(
        "room-a",
        datetime(2026, 1, 12, 10, 30),
        datetime(2026, 1, 12, 10, 45),
        statuses=(ReservationStatus.APPROVED, ReservationStatus.PENDING),
    )
    assert sorted(item.reservation_id for item in with_pending) == ["r1", "r4"]


def test_requester_filter_and_delete(repository) -> None:
    repository.save_reservation(_reservation("r1", 10, 11))
    repository.save_reservation(_reservation("r2", 12, 13, requester_id="u2"))

    assert [item.reservation_id for item in repository.list_reservations_for_requester("u2")] == ["r2"]

    repository.delete_reservation("r2")

    assert repository.get_reservation("r2") is None
    assert [item.reservation_id for item in repository.list_reservations()] == ["r1"]


def test_returned_entities_are_detached(repository) -> None:
    repository.save_reservation(_reservation("r1", 10, 11))
    loaded = repository.get_reservation("r1")
    loaded.cancel()

    assert repository.get_reservation("r1").status is ReservationStatus.APPROVED


def test_sqlite_count_reservations(tmp_path) -> None:
    repo = DataRepository(_build_test_settings(tmp_path, "count.db"))
    repo.initialize_database()
    repo.seed_default_rooms()
    repo.save_reservation(_reservation("r1", 10, 11))

    assert repo.count_reservations() == 1


def test_build_repository_selects_backend(tmp_path) -> None:
    assert isinstance(
        build_repository(_build_test_settings(tmp_path, "a.db", storage_backend="memory")),
        InMemoryRepository,
    )
    assert isinstance(
        build_repository(_build_test_settings(tmp_path, "b.db", storage_backend="sqlite")),
        DataRepository,
    )
    with pytest.raises(ValueError):
        build_repository(_build_test_settings(tmp_path, "c.db", storage_backend="redis"))


def test_room_equality_uses_id_and_status() -> None:
    assert Room("room-a", "Room A", 3) == Room("room-a", "Renamed", 4)
