"""Slot availability and booking validation for a single facility.

Every function here is pure: reservations are passed in by the caller and
nothing is fetched, stored or logged. Intervals are half-open, so a booking
ending at 10:00 never conflicts with one starting at 10:00.
"""

from datetime import date, time
from typing import Iterable, List

from terrain_booking.models import (
    BookingRejection,
    BookingResult,
    FacilitySchedule,
    Reservation,
    Slot,
    TimeInterval,
    from_minutes,
    to_minutes,
)

MINUTES_PER_DAY = 24 * 60


class InvalidScheduleError(ValueError):
    """Raised for a malformed FacilitySchedule."""


class InvalidDurationError(ValueError):
    """Raised when a duration is not offered or would cross midnight."""


def conflicts(a: TimeInterval, b: TimeInterval) -> bool:
    return a.start < b.end and b.start < a.end


def validate_schedule(schedule: FacilitySchedule):
    if schedule.operating_start >= schedule.operating_end:
        raise InvalidScheduleError(
            f"operating start {schedule.operating_start:%H:%M} must be before end {schedule.operating_end:%H:%M}"
        )
    if schedule.slot_granularity <= 0:
        raise InvalidScheduleError(f"slot granularity must be positive, got {schedule.slot_granularity}")
    bad = [d for d in schedule.allowed_durations if d <= 0]
    if bad:
        raise InvalidScheduleError(f"allowed durations must be positive, got {bad}")


def _active(reservations: Iterable[Reservation]) -> List[Reservation]:
    return [r for r in reservations if not r.is_cancelled]


def enumerate_slots(schedule: FacilitySchedule, reservations: Iterable[Reservation]) -> List[Slot]:
    """Splits the operating hours into consecutive slots and flags the occupied ones.

    A trailing remainder shorter than the granularity is dropped.
    """
    validate_schedule(schedule)
    occupied_intervals = [r.interval for r in _active(reservations)]

    step = schedule.slot_granularity
    end = to_minutes(schedule.operating_end)
    slots = []
    current = to_minutes(schedule.operating_start)
    while current + step <= end:
        interval = TimeInterval(start=from_minutes(current), end=from_minutes(current + step))
        occupied = any(conflicts(interval, other) for other in occupied_intervals)
        slots.append(Slot(interval=interval, occupied=occupied))
        current += step

    return slots


def is_available(day: date, candidate: TimeInterval, reservations: Iterable[Reservation]) -> bool:
    """True when no confirmed reservation on `day` overlaps the candidate."""
    return not any(r.date == day and conflicts(candidate, r.interval) for r in _active(reservations))


def compute_end_time(start: time, duration_minutes: int, schedule: FacilitySchedule | None = None) -> time:
    """Adds `duration_minutes` to `start`.

    Raises InvalidDurationError when the duration is not positive, is not one
    of `schedule.allowed_durations`, or would push the end past midnight.
    """
    if duration_minutes <= 0:
        raise InvalidDurationError(f"duration must be positive, got {duration_minutes}")
    if schedule is not None and duration_minutes not in schedule.allowed_durations:
        raise InvalidDurationError(
            f"duration {duration_minutes}min is not one of {list(schedule.allowed_durations)}"
        )

    start_minutes = to_minutes(start)
    end_minutes = (start_minutes + duration_minutes) % MINUTES_PER_DAY
    if end_minutes <= start_minutes or duration_minutes >= MINUTES_PER_DAY:
        raise InvalidDurationError(f"booking from {start:%H:%M} for {duration_minutes}min crosses midnight")
    return from_minutes(end_minutes)


def validate_booking(
    schedule: FacilitySchedule,
    day: date,
    start: time,
    duration_minutes: int,
    reservations: Iterable[Reservation],
) -> BookingResult:
    """Checks a candidate booking and reports the first failing rule.

    Order: duration, operating hours, conflicts.
    """
    validate_schedule(schedule)

    if duration_minutes not in schedule.allowed_durations:
        return BookingResult.rejected(BookingRejection.DURATION_NOT_ALLOWED)

    try:
        end = compute_end_time(start, duration_minutes, schedule)
    except InvalidDurationError:
        # A candidate crossing midnight necessarily ends after closing time
        return BookingResult.rejected(BookingRejection.OUTSIDE_OPERATING_HOURS)

    if start < schedule.operating_start or end > schedule.operating_end:
        return BookingResult.rejected(BookingRejection.OUTSIDE_OPERATING_HOURS)

    candidate = TimeInterval(start=start, end=end)
    if not is_available(day, candidate, reservations):
        return BookingResult.rejected(BookingRejection.SLOT_CONFLICT)

    return BookingResult.accepted(candidate)
