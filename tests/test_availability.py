from datetime import date, time

import pytest

from terrain_booking import availability
from terrain_booking.availability import InvalidDurationError, InvalidScheduleError
from terrain_booking.models import (
    BookingRejection,
    FacilitySchedule,
    Reservation,
    ReservationStatus,
    TimeInterval,
)

DAY = date(2025, 6, 14)


def t(value: str) -> time:
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def interval(start: str, end: str) -> TimeInterval:
    return TimeInterval(start=t(start), end=t(end))


def reservation(start: str, end: str, status=ReservationStatus.CONFIRMED, day=DAY) -> Reservation:
    return Reservation(date=day, interval=interval(start, end), subject_id="u1", status=status)


@pytest.fixture
def schedule():
    return FacilitySchedule(
        operating_start=t("08:00"),
        operating_end=t("22:00"),
        slot_granularity=60,
        allowed_durations=(60, 90, 120),
    )


# --- conflicts ---


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (("10:00", "11:00"), ("09:00", "10:00"), False),
        (("10:00", "11:00"), ("11:00", "12:00"), False),
        (("10:00", "11:00"), ("09:30", "11:30"), True),
        (("10:00", "11:00"), ("10:15", "10:45"), True),
        (("10:00", "11:00"), ("10:30", "12:00"), True),
        (("10:00", "11:00"), ("10:00", "11:00"), True),
        (("08:00", "09:00"), ("20:00", "21:00"), False),
    ],
)
def test_conflicts_is_symmetric(a, b, expected):
    first, second = interval(*a), interval(*b)
    assert availability.conflicts(first, second) is expected
    assert availability.conflicts(second, first) is expected


# --- enumerate_slots ---


def test_enumerate_slots_covers_operating_hours(schedule):
    slots = availability.enumerate_slots(schedule, [])

    assert len(slots) == 14
    assert slots[0].interval == interval("08:00", "09:00")
    assert slots[-1].interval == interval("21:00", "22:00")
    for prev, nxt in zip(slots, slots[1:]):
        assert prev.interval.end == nxt.interval.start
        assert not availability.conflicts(prev.interval, nxt.interval)
    assert not any(s.occupied for s in slots)


def test_enumerate_slots_drops_partial_remainder():
    schedule = FacilitySchedule(operating_start=t("08:00"), operating_end=t("10:30"), slot_granularity=60)
    slots = availability.enumerate_slots(schedule, [])

    assert [str(s.interval) for s in slots] == ["08:00-09:00", "09:00-10:00"]


def test_enumerate_slots_marks_partial_overlap_as_occupied():
    schedule = FacilitySchedule(operating_start=t("08:00"), operating_end=t("12:00"), slot_granularity=30)
    slots = availability.enumerate_slots(schedule, [reservation("09:15", "10:00")])

    occupied = [str(s.interval) for s in slots if s.occupied]
    assert occupied == ["09:00-09:30", "09:30-10:00"]


def test_enumerate_slots_ignores_cancelled(schedule):
    slots = availability.enumerate_slots(schedule, [reservation("14:00", "15:00", ReservationStatus.CANCELLED)])
    assert not any(s.occupied for s in slots)


def test_enumerate_slots_is_repeatable(schedule):
    reservations = [reservation("10:00", "12:00")]
    assert availability.enumerate_slots(schedule, reservations) == availability.enumerate_slots(
        schedule, reservations
    )


@pytest.mark.parametrize(
    "start, end, granularity",
    [
        ("22:00", "08:00", 60),
        ("08:00", "08:00", 60),
        ("08:00", "22:00", 0),
        ("08:00", "22:00", -30),
    ],
)
def test_enumerate_slots_rejects_malformed_schedule(start, end, granularity):
    schedule = FacilitySchedule(operating_start=t(start), operating_end=t(end), slot_granularity=granularity)
    with pytest.raises(InvalidScheduleError):
        availability.enumerate_slots(schedule, [])


def test_validate_schedule_rejects_non_positive_duration():
    schedule = FacilitySchedule(
        operating_start=t("08:00"), operating_end=t("22:00"), allowed_durations=(0, 60)
    )
    with pytest.raises(InvalidScheduleError):
        availability.validate_schedule(schedule)


# --- is_available ---


@pytest.mark.parametrize("existing", [("09:00", "10:00"), ("11:00", "12:00")])
def test_adjacent_reservation_is_not_a_conflict(existing):
    assert availability.is_available(DAY, interval("10:00", "11:00"), [reservation(*existing)])


def test_containing_reservation_is_a_conflict():
    assert not availability.is_available(DAY, interval("10:00", "11:00"), [reservation("09:30", "11:30")])


def test_cancelled_reservation_does_not_block():
    existing = [reservation("10:00", "11:00", ReservationStatus.CANCELLED)]
    assert availability.is_available(DAY, interval("10:00", "11:00"), existing)


def test_reservation_on_other_date_does_not_block():
    existing = [reservation("10:00", "11:00", day=date(2025, 6, 15))]
    assert availability.is_available(DAY, interval("10:00", "11:00"), existing)


# --- compute_end_time ---


def test_compute_end_time():
    assert availability.compute_end_time(t("10:00"), 90) == t("11:30")


def test_compute_end_time_adds_minutes():
    assert availability.compute_end_time(t("10:45"), 30) == t("11:15")


@pytest.mark.parametrize("start, duration", [("23:30", 60), ("23:00", 60), ("10:00", 24 * 60)])
def test_compute_end_time_rejects_midnight_crossing(start, duration):
    with pytest.raises(InvalidDurationError):
        availability.compute_end_time(t(start), duration)


@pytest.mark.parametrize("duration", [0, -30])
def test_compute_end_time_rejects_non_positive_duration(duration):
    with pytest.raises(InvalidDurationError):
        availability.compute_end_time(t("10:00"), duration)


def test_compute_end_time_checks_allowed_durations(schedule):
    with pytest.raises(InvalidDurationError):
        availability.compute_end_time(t("10:00"), 45, schedule)
    assert availability.compute_end_time(t("10:00"), 120, schedule) == t("12:00")


# --- validate_booking ---


def test_duration_not_allowed_wins_over_conflict():
    schedule = FacilitySchedule(
        operating_start=t("08:00"), operating_end=t("22:00"), allowed_durations=(30, 60, 90)
    )
    result = availability.validate_booking(schedule, DAY, t("10:00"), 45, [reservation("10:00", "11:00")])

    assert not result.ok
    assert result.reason == BookingRejection.DURATION_NOT_ALLOWED


def test_start_before_opening_is_outside_hours(schedule):
    result = availability.validate_booking(schedule, DAY, t("07:00"), 60, [])
    assert result.reason == BookingRejection.OUTSIDE_OPERATING_HOURS


def test_end_after_closing_is_outside_hours(schedule):
    result = availability.validate_booking(schedule, DAY, t("21:00"), 90, [])
    assert result.reason == BookingRejection.OUTSIDE_OPERATING_HOURS


def test_ending_exactly_at_closing_is_accepted(schedule):
    result = availability.validate_booking(schedule, DAY, t("20:00"), 120, [])
    assert result.ok
    assert result.interval == interval("20:00", "22:00")


def test_midnight_crossing_is_outside_hours():
    schedule = FacilitySchedule(
        operating_start=t("08:00"), operating_end=t("23:59"), allowed_durations=(60,)
    )
    result = availability.validate_booking(schedule, DAY, t("23:30"), 60, [])
    assert result.reason == BookingRejection.OUTSIDE_OPERATING_HOURS


def test_outside_hours_wins_over_conflict(schedule):
    result = availability.validate_booking(schedule, DAY, t("07:00"), 120, [reservation("08:00", "09:00")])
    assert result.reason == BookingRejection.OUTSIDE_OPERATING_HOURS


def test_validate_booking_rejects_malformed_schedule():
    schedule = FacilitySchedule(operating_start=t("22:00"), operating_end=t("08:00"))
    with pytest.raises(InvalidScheduleError):
        availability.validate_booking(schedule, DAY, t("10:00"), 60, [])


def test_end_to_end_scenario(schedule):
    reservations = [reservation("14:00", "15:00")]

    taken = availability.validate_booking(schedule, DAY, t("14:00"), 60, reservations)
    assert taken.reason == BookingRejection.SLOT_CONFLICT
    assert taken.interval is None

    free = availability.validate_booking(schedule, DAY, t("13:00"), 60, reservations)
    assert free.ok
    assert free.reason is None
    assert free.interval == interval("13:00", "14:00")

    slots = availability.enumerate_slots(schedule, reservations)
    assert len(slots) == 14
    assert [str(s.interval) for s in slots if s.occupied] == ["14:00-15:00"]
    assert slots[0].interval.start == t("08:00")
    assert slots[-1].interval.end == t("22:00")
