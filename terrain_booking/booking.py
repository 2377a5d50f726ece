import logging
import uuid
from dataclasses import dataclass
from datetime import date, time
from typing import Dict, List, Optional

from terrain_booking import availability, config, persist, telegram_notifier
from terrain_booking.models import (
    AvailabilityQuery,
    BookingRejection,
    BookingResult,
    FacilitySchedule,
    Reservation,
    Slot,
    Terrain,
)

logger = logging.getLogger(__name__)

REJECTION_MESSAGES: Dict[BookingRejection, str] = {
    BookingRejection.DURATION_NOT_ALLOWED: "That duration isn't offered.",
    BookingRejection.OUTSIDE_OPERATING_HOURS: "The terrain is closed at that time.",
    BookingRejection.SLOT_CONFLICT: "That slot is already taken.",
}


@dataclass
class BookingOutcome:
    result: BookingResult
    reservation: Optional[Reservation] = None


def rejection_message(reason: BookingRejection) -> str:
    return REJECTION_MESSAGES[reason]


def day_availability(
    day: date,
    schedule: FacilitySchedule | None = None,
    terrain: Terrain | None = None,
) -> List[Slot]:
    """Returns the slot grid of `day` with occupancy taken from the store."""
    schedule = schedule or config.get_facility_schedule()
    terrain = terrain or persist.load_terrain()

    query = AvailabilityQuery(date=day, reservations=tuple(persist.get_reservations_for_date(day, terrain.id)))
    logger.debug(f"{len(query.reservations)} confirmed reservations on {query.date}")
    return availability.enumerate_slots(schedule, query.reservations)


def book_slot(
    day: date,
    start: time,
    duration_minutes: int,
    subject_id: str,
    schedule: FacilitySchedule | None = None,
    terrain: Terrain | None = None,
) -> BookingOutcome:
    """Validates a booking against the current reservations and stores it when accepted.

    Reservations are re-read right before the write so the check sees the
    latest state of the store.
    """
    schedule = schedule or config.get_facility_schedule()
    terrain = terrain or persist.load_terrain()

    existing = persist.get_reservations_for_date(day, terrain.id)
    result = availability.validate_booking(schedule, day, start, duration_minutes, existing)
    if not result.ok:
        logger.info(f"Booking on {day} at {start:%H:%M} for {duration_minutes}min rejected: {result.reason.value}")
        return BookingOutcome(result=result)

    user = persist.get_user(subject_id)
    reservation = Reservation(
        id=uuid.uuid4().hex,
        terrain_id=terrain.id,
        date=day,
        interval=result.interval,
        subject_id=subject_id,
        subject_name=user.name if user else "",
        subject_email=user.email if user else "",
        total_price=terrain.price_for(duration_minutes),
    )
    persist.add_reservation(reservation)
    logger.info(f"Reservation {reservation.id} created for {subject_id} on {day} {reservation.interval}")

    telegram_notifier.send_telegram_message(telegram_notifier.format_reservation_message(reservation, terrain))
    return BookingOutcome(result=result, reservation=reservation)


def cancel_booking(reservation_id: str, subject_id: str | None = None) -> Optional[Reservation]:
    """Cancels a reservation. When `subject_id` is given, only its own reservations may be cancelled."""
    if subject_id is not None:
        owned = {r.id for r in persist.get_user_reservations(subject_id)}
        if reservation_id not in owned:
            logger.warning(f"Reservation {reservation_id} does not belong to {subject_id}.")
            return None

    cancelled = persist.cancel_reservation(reservation_id)
    if cancelled is None:
        return None

    terrain = persist.load_terrain()
    telegram_notifier.send_telegram_message(
        telegram_notifier.format_reservation_message(cancelled, terrain, cancelled=True)
    )
    return cancelled
