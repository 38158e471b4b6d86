"""SQLite-backed repository for rooms and reservations."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from backend.domain.models import Reservation, ReservationStatus, Room, RoomStatus
from backend.repository.base import Repository
from backend.repository.memory_repository import InMemoryRepository
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def _to_db_timestamp(value: datetime) -> str:
    # Fixed-width text keeps lexicographic order equal to chronological order.
    return value.isoformat(sep=" ", timespec="microseconds")


def _from_db_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


class DataRepository(Repository):
    """Encapsulates SQLite access so business logic stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Rooms (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        capacity INTEGER NOT NULL CHECK (capacity > 0),
                        amenities TEXT NOT NULL DEFAULT '[]',
                        status TEXT NOT NULL DEFAULT 'available'
                            CHECK (status IN ('available', 'occupied', 'maintenance'))
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Reservations (
                        id TEXT PRIMARY KEY,
                        room_id TEXT NOT NULL,
                        requester_id TEXT NOT NULL,
                        requester_name TEXT NOT NULL,
                        start_time TEXT NOT NULL,
                        end_time TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'pending'
                            CHECK (status IN ('pending', 'approved', 'cancelled', 'completed')),
                        created_at TEXT NOT NULL,
                        FOREIGN KEY (room_id) REFERENCES Rooms(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_reservations_room_window
                    ON Reservations(room_id, status, start_time, end_time);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_reservations_requester
                    ON Reservations(requester_id);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_default_rooms(self) -> int:
        try:
            added = super().seed_default_rooms()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Room seeding failed: {exc}") from exc
        if added:
            logger.info("Seeded %s default rooms", added)
        else:
            logger.info("Rooms already present; skipping seed")
        return added

    @staticmethod
    def _row_to_room(row: sqlite3.Row) -> Room:
        return Room(
            room_id=str(row["id"]),
            name=str(row["name"]),
            capacity=int(row["capacity"]),
            amenities=tuple(json.loads(row["amenities"])),
            status=RoomStatus(row["status"]),
        )

    @staticmethod
    def _row_to_reservation(row: sqlite3.Row) -> Reservation:
        return Reservation(
            reservation_id=str(row["id"]),
            room_id=str(row["room_id"]),
            requester_id=str(row["requester_id"]),
            requester_name=str(row["requester_name"]),
            start=_from_db_timestamp(row["start_time"]),
            end=_from_db_timestamp(row["end_time"]),
            status=ReservationStatus(row["status"]),
            created_at=_from_db_timestamp(row["created_at"]),
        )

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, capacity, amenities, status FROM Rooms WHERE id = ?;",
                (room_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return self._row_to_room(row)

    def list_rooms(self) -> list[Room]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id, name, capacity, amenities, status FROM Rooms ORDER BY name ASC, id ASC;"
            )
            return [self._row_to_room(row) for row in cursor.fetchall()]

    def save_room(self, room: Room) -> Room:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Rooms (id, name, capacity, amenities, status)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    capacity = excluded.capacity,
                    amenities = excluded.amenities,
                    status = excluded.status;
                """,
                (
                    room.room_id,
                    room.name,
                    room.capacity,
                    json.dumps(list(room.amenities)),
                    room.status.value,
                ),
            )
            conn.commit()
        return room

    _RESERVATION_COLUMNS = (
        "id, room_id, requester_id, requester_name, start_time, end_time, status, created_at"
    )

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {self._RESERVATION_COLUMNS} FROM Reservations WHERE id = ?;",
                (reservation_id,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return self._row_to_reservation(row)

    def list_reservations(self) -> list[Reservation]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {self._RESERVATION_COLUMNS}
                FROM Reservations
                ORDER BY start_time ASC, id ASC;
                """
            )
            return [self._row_to_reservation(row) for row in cursor.fetchall()]

    def list_reservations_for_requester(self, requester_id: str) -> list[Reservation]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {self._RESERVATION_COLUMNS}
                FROM Reservations
                WHERE requester_id = ?
                ORDER BY start_time ASC, id ASC;
                """,
                (requester_id,),
            )
            return [self._row_to_reservation(row) for row in cursor.fetchall()]

    def list_overlapping(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[ReservationStatus] = (ReservationStatus.APPROVED,),
    ) -> list[Reservation]:
        status_values = sorted({status.value for status in statuses})
        if not status_values:
            return []
        placeholders = ",".join("?" for _ in status_values)
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {self._RESERVATION_COLUMNS}
                FROM Reservations
                WHERE room_id = ?
                  AND status IN ({placeholders})
                  AND start_time < ?
                  AND end_time > ?
                ORDER BY start_time ASC, id ASC;
                """,
                (room_id, *status_values, _to_db_timestamp(end), _to_db_timestamp(start)),
            )
            return [self._row_to_reservation(row) for row in cursor.fetchall()]

    def save_reservation(self, reservation: Reservation) -> Reservation:
        """Insert or update; only the status column is mutable after insert."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Reservations (
                    id,
                    room_id,
                    requester_id,
                    requester_name,
                    start_time,
                    end_time,
                    status,
                    created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET status = excluded.status;
                """,
                (
                    reservation.reservation_id,
                    reservation.room_id,
                    reservation.requester_id,
                    reservation.requester_name,
                    _to_db_timestamp(reservation.start),
                    _to_db_timestamp(reservation.end),
                    reservation.status.value,
                    _to_db_timestamp(reservation.created_at),
                ),
            )
            conn.commit()
        return reservation

    def delete_reservation(self, reservation_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM Reservations WHERE id = ?;", (reservation_id,))
            conn.commit()

    def count_reservations(self) -> int:
        """Return persisted reservation count for diagnostics and tests."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Reservations;")
            return int(cursor.fetchone()["count"])


def build_repository(settings: Optional[Settings] = None) -> Repository:
    """Select the backing store named by STORAGE_BACKEND."""
    resolved = settings or get_settings()
    if resolved.storage_backend == "memory":
        return InMemoryRepository()
    if resolved.storage_backend == "sqlite":
        return DataRepository(resolved)
    raise ValueError(
        f"Unknown storage backend {resolved.storage_backend!r}; expected 'sqlite' or 'memory'"
    )
