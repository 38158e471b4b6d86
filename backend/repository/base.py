"""Storage contracts the reservation core depends on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

from backend.domain.models import Reservation, ReservationStatus, Room


# (room_id, name, capacity, amenities)
DEFAULT_ROOMS: tuple[tuple[str, str, int, tuple[str, ...]], ...] = (
    ("room-a", "Room A", 3, ("Table", "Chairs", "WiFi")),
    ("room-b", "Room B", 3, ("Table", "Chairs", "WiFi")),
    ("room-c", "Room C", 3, ("Table", "Chairs", "WiFi")),
    ("room-d", "Room D", 3, ("Table", "Chairs", "WiFi")),
    ("room-e", "Room E", 3, ("Table", "Chairs", "WiFi")),
)


class ResourceCatalog(ABC):
    @abstractmethod
    def get_room(self, room_id: str) -> Optional[Room]:
        ...

    @abstractmethod
    def list_rooms(self) -> list[Room]:
        ...

    @abstractmethod
    def save_room(self, room: Room) -> Room:
        ...


class ReservationStore(ABC):
    @abstractmethod
    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        ...

    @abstractmethod
    def list_reservations(self) -> list[Reservation]:
        ...

    @abstractmethod
    def list_reservations_for_requester(self, requester_id: str) -> list[Reservation]:
        ...

    @abstractmethod
    def list_overlapping(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        statuses: Iterable[ReservationStatus] = (ReservationStatus.APPROVED,),
    ) -> list[Reservation]:
        """Return reservations of `room_id` with `r.start < end and r.end > start`."""

    @abstractmethod
    def save_reservation(self, reservation: Reservation) -> Reservation:
        ...

    @abstractmethod
    def delete_reservation(self, reservation_id: str) -> None:
        ...


class Repository(ResourceCatalog, ReservationStore):
    """A backing store that serves both the catalog and the reservations."""

    @abstractmethod
    def initialize_database(self) -> None:
        ...

    def seed_default_rooms(self) -> int:
        """Provision the default rooms when the catalog is empty; returns rows added."""
        if self.list_rooms():
            return 0
        for room_id, name, capacity, amenities in DEFAULT_ROOMS:
            self.save_room(Room(room_id=room_id, name=name, capacity=capacity, amenities=amenities))
        return len(DEFAULT_ROOMS)
