"""Process-local store used for tests and the memory storage backend."""

from __future__ import annotations

import copy
from datetime import datetime
from threading import RLock
from typing import Iterable, Optional

from backend.domain.models import Reservation, ReservationStatus, Room
from backend.repository.base import Repository


class InMemoryRepository(Repository):
    """Keeps copies of entities so callers never mutate stored state in place."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._reservations: dict[str, Reservation] = {}

    def initialize_database(self) -> None:
        return None

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.get(room_id)
            return copy.copy(room) if room is not None else None

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return [copy.copy(room) for room in self._rooms.values()]

    def save_room(self, room: Room) -> Room:
        with self._lock:
            self._rooms[room.room_id] = copy.copy(room)
        return room

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        with self._lock:
            reservation = self._reservations.get(reservation_id)
            return copy.copy(reservation) if reservation is not None else None

    def list_reservations(self) -> list[Reservation]:
        with self._lock:
            items = [copy.copy(item) for item in self._reservations.values()]
        return sorted(items, key=lambda item: (item.start, item.reservation_id))

    def list_reservations_for_requester(self, requester_id: str) -> list[Reservation]:
        return [
            item
            for item in self.list_reservations()
            if item.requester_id == requester_id
        ]

    def list_overlapping(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[ReservationStatus] = (ReservationStatus.APPROVED,),
    ) -> list[Reservation]:
        wanted = frozenset(statuses)
        return [
            item
            for item in self.list_reservations()
            if item.room_id == room_id and item.status in wanted and item.overlaps(start, end)
        ]

    def save_reservation(self, reservation: Reservation) -> Reservation:
        with self._lock:
            self._reservations[reservation.reservation_id] = copy.copy(reservation)
        return reservation

    def delete_reservation(self, reservation_id: str) -> None:
        with self._lock:
            self._reservations.pop(reservation_id, None)
