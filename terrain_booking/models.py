from datetime import date as Date
from datetime import datetime, time, timezone
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    return time(hour=minutes // 60, minute=minutes % 60)


def _check_minute_resolution(value: time) -> time:
    if value.second or value.microsecond:
        raise ValueError(f"time {value.isoformat()} must be a whole minute")
    return value


class TimeInterval(BaseModel):
    """Half-open span of a day: includes `start`, excludes `end`."""

    model_config = ConfigDict(frozen=True)

    start: time
    end: time

    @field_validator("start", "end")
    @classmethod
    def _whole_minutes(cls, value: time) -> time:
        return _check_minute_resolution(value)

    @model_validator(mode="after")
    def _check_order(self):
        if self.start >= self.end:
            raise ValueError(f"interval start {self.start:%H:%M} must be before end {self.end:%H:%M}")
        return self

    @property
    def duration_minutes(self) -> int:
        return to_minutes(self.end) - to_minutes(self.start)

    def __str__(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"


class ReservationStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Reservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    terrain_id: str = ""
    date: Date
    interval: TimeInterval
    subject_id: str
    subject_name: str = ""
    subject_email: str = ""
    status: ReservationStatus = ReservationStatus.CONFIRMED
    total_price: float = 0.0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_cancelled(self) -> bool:
        return self.status == ReservationStatus.CANCELLED


class FacilitySchedule(BaseModel):
    """Operating hours and booking rules of one facility.

    Structural checks (start before end, positive granularity and durations)
    live in `availability.validate_schedule` so that callers get an
    `InvalidScheduleError` rather than a pydantic error.
    """

    model_config = ConfigDict(frozen=True)

    operating_start: time
    operating_end: time
    slot_granularity: int = 60
    allowed_durations: Tuple[int, ...] = (30, 60, 90, 120, 150, 180)

    @field_validator("operating_start", "operating_end")
    @classmethod
    def _whole_minutes(cls, value: time) -> time:
        return _check_minute_resolution(value)

    @field_validator("allowed_durations")
    @classmethod
    def _sort_durations(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        return tuple(sorted(set(value)))


class AvailabilityQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: Date
    reservations: Tuple[Reservation, ...] = ()


class Slot(BaseModel):
    model_config = ConfigDict(frozen=True)

    interval: TimeInterval
    occupied: bool


class BookingRejection(str, Enum):
    DURATION_NOT_ALLOWED = "DurationNotAllowed"
    OUTSIDE_OPERATING_HOURS = "OutsideOperatingHours"
    SLOT_CONFLICT = "SlotConflict"


class BookingResult(BaseModel):
    """Outcome of `validate_booking`: exactly one of `interval` or `reason` is set."""

    model_config = ConfigDict(frozen=True)

    interval: TimeInterval | None = None
    reason: BookingRejection | None = None

    @model_validator(mode="after")
    def _check_exclusive(self):
        if (self.interval is None) == (self.reason is None):
            raise ValueError("exactly one of interval or reason must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.interval is not None

    @classmethod
    def accepted(cls, interval: TimeInterval) -> "BookingResult":
        return cls(interval=interval)

    @classmethod
    def rejected(cls, reason: BookingRejection) -> "BookingResult":
        return cls(reason=reason)


class Terrain(BaseModel):
    id: str
    name: str = ""
    description: str = ""
    surface: str = ""
    coating: str = ""
    lighting: bool = False
    price_per_hour: float = 0.0
    image_url: str = ""

    def price_for(self, duration_minutes: int) -> float:
        return round(self.price_per_hour * duration_minutes / 60, 2)


class User(BaseModel):
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    profile_image_url: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

