"""Request/response DTOs shared by the booking, room and admin controllers."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from backend.domain.models import (
    AvailabilitySlot,
    Reservation,
    ReservationStats,
    ReservationStatus,
    Room,
    RoomStatus,
)


def _to_wall_clock(value: datetime) -> datetime:
    # The core works in naive facility-local time.
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class CreateReservationRequest(BaseModel):
    room_id: str = Field(min_length=1)
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_timezone(cls, value: datetime) -> datetime:
        return _to_wall_clock(value)


class ReservationResponse(BaseModel):
    id: str
    room_id: str
    user_id: str
    user_name: str
    start_time: datetime
    end_time: datetime
    status: ReservationStatus
    created_at: datetime
    can_extend: bool = False

    @classmethod
    def from_domain(cls, reservation: Reservation) -> "ReservationResponse":
        return cls(
            id=reservation.reservation_id,
            room_id=reservation.room_id,
            user_id=reservation.requester_id,
            user_name=reservation.requester_name,
            start_time=reservation.start,
            end_time=reservation.end,
            status=reservation.status,
            created_at=reservation.created_at,
            can_extend=reservation.can_extend(),
        )


class RoomResponse(BaseModel):
    id: str
    name: str
    capacity: int = Field(gt=0)
    amenities: list[str]
    status: RoomStatus

    @classmethod
    def from_domain(cls, room: Room) -> "RoomResponse":
        return cls(
            id=room.room_id,
            name=room.name,
            capacity=room.capacity,
            amenities=list(room.amenities),
            status=room.status,
        )


class SlotResponse(BaseModel):
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=1, le=24)
    is_available: bool
    display_label: str

    @classmethod
    def from_domain(cls, slot: AvailabilitySlot) -> "SlotResponse":
        return cls(
            start_hour=slot.start_hour,
            end_hour=slot.end_hour,
            is_available=slot.is_available,
            display_label=slot.display_label,
        )


class RoomStatusUpdateRequest(BaseModel):
    status: RoomStatus


class StatsResponse(BaseModel):
    total_bookings: int = Field(ge=0)
    active_bookings: int = Field(ge=0)
    pending_bookings: int = Field(ge=0)
    total_rooms: int = Field(ge=0)
    available_rooms: int = Field(ge=0)

    @classmethod
    def from_domain(cls, stats: ReservationStats) -> "StatsResponse":
        return cls(
            total_bookings=stats.total_bookings,
            active_bookings=stats.active_bookings,
            pending_bookings=stats.pending_bookings,
            total_rooms=stats.total_rooms,
            available_rooms=stats.available_rooms,
        )


class MessageResponse(BaseModel):
    message: str
