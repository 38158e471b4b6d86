"""Read-only hourly free/busy grid for a room on a given day."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from backend.domain.constraints import OperatingCalendar
from backend.domain.errors import ResourceNotFoundError
from backend.domain.models import AvailabilitySlot, ReservationStatus
from backend.repository.base import ResourceCatalog, ReservationStore


def _twelve_hour(hour: int) -> tuple[int, str]:
    suffix = "AM" if hour < 12 or hour == 24 else "PM"
    display = hour % 12
    return (12 if display == 0 else display), suffix


def format_slot_label(start_hour: int, end_hour: int) -> str:
    """Render e.g. `9:00 AM - 10:00 AM`; hours 0 and 24 display as 12 AM."""
    start_display, start_suffix = _twelve_hour(start_hour)
    end_display, end_suffix = _twelve_hour(end_hour)
    return f"{start_display}:00 {start_suffix} - {end_display}:00 {end_suffix}"


class AvailabilityService:
    def __init__(
        self,
        catalog: ResourceCatalog,
        store: ReservationStore,
        calendar: Optional[OperatingCalendar] = None,
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._calendar = calendar or OperatingCalendar()

    def slots_for(self, room_id: str, target_date: date) -> list[AvailabilitySlot]:
        if self._catalog.get_room(room_id) is None:
            raise ResourceNotFoundError(f"Room {room_id} not found")

        day_start = datetime.combine(target_date, time.min)
        day_end = day_start + timedelta(days=1)
        booked = self._store.list_overlapping(
            room_id,
            day_start,
            day_end,
            statuses=(ReservationStatus.APPROVED,),
        )

        slots: list[AvailabilitySlot] = []
        for hour in range(self._calendar.open_hour, self._calendar.close_hour):
            slot_start = day_start + timedelta(hours=hour)
            is_booked = any(
                reservation.start <= slot_start < reservation.end for reservation in booked
            )
            slots.append(
                AvailabilitySlot(
                    start_hour=hour,
                    end_hour=hour + 1,
                    is_available=not is_booked,
                    display_label=format_slot_label(hour, hour + 1),
                )
            )
        return slots
