import logging
import sys
from datetime import date, datetime, time
from typing import List

from terrain_booking import booking, persist
from terrain_booking.models import Reservation, Slot, User

logger = logging.getLogger(__name__)


def parse_date(date_str: str | None) -> date:
    """Parses YYYY-MM-DD, defaulting to today. Exits on bad input."""
    if not date_str:
        return datetime.now().date()
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        logger.error("Error: Date must be in YYYY-MM-DD format.")
        sys.exit(1)


def parse_time(time_str: str) -> time:
    try:
        return datetime.strptime(time_str, "%H:%M").time()
    except ValueError:
        logger.error("Error: Start time must be in HH:MM format.")
        sys.exit(1)


def format_duration(minutes: int) -> str:
    """Formats minutes the way the booking screen shows them: 30min, 1h, 1h30."""
    hours, rest = divmod(minutes, 60)
    if not hours:
        return f"{rest}min"
    if not rest:
        return f"{hours}h"
    return f"{hours}h{rest:02d}"


def print_availability_report(day: date, slots: List[Slot]):
    """Prints the formatted availability report to stdout."""
    print(f"\n--- Availability Report for {day.isoformat()} ---")

    for slot in slots:
        prefix = "[BOOKED]   " if slot.occupied else "[AVAILABLE]"
        print(f"{prefix} {slot.interval}")

    free = [s for s in slots if not s.occupied]
    if free:
        print(f"Summary: Found {len(free)} available time slots for {day.isoformat()}!")
    else:
        print(f"Summary: No slots available for {day.isoformat()}.")


def print_reservation(reservation: Reservation):
    print(
        f"{reservation.id}  {reservation.date.isoformat()} {reservation.interval} "
        f"({format_duration(reservation.interval.duration_minutes)})  "
        f"{reservation.status.value}  {reservation.total_price:.2f}"
    )


def show_slots(date_str: str | None = None) -> List[Slot]:
    day = parse_date(date_str)
    slots = booking.day_availability(day)
    print_availability_report(day, slots)
    return slots


def book(date_str: str, start_str: str, duration: int, subject_id: str) -> bool:
    day = parse_date(date_str)
    start = parse_time(start_str)

    outcome = booking.book_slot(day, start, duration, subject_id)
    if not outcome.result.ok:
        print(f"Booking refused: {booking.rejection_message(outcome.result.reason)}")
        return False

    print("Booking confirmed:")
    print_reservation(outcome.reservation)
    return True


def cancel(reservation_id: str, subject_id: str | None = None) -> bool:
    cancelled = booking.cancel_booking(reservation_id, subject_id)
    if cancelled is None:
        print(f"No reservation {reservation_id} to cancel.")
        return False
    print("Reservation cancelled:")
    print_reservation(cancelled)
    return True


def list_reservations(subject_id: str) -> List[Reservation]:
    reservations = persist.get_user_reservations(subject_id)
    print(f"\n--- Reservations for {subject_id} ---")
    for r in reservations:
        print_reservation(r)
    if not reservations:
        print("No reservations yet.")
    return reservations


def show_terrain(**changes):
    """Prints the terrain metadata, applying and saving any non-None changes first."""
    terrain = persist.load_terrain()
    updates = {k: v for k, v in changes.items() if v is not None}
    if updates:
        terrain = terrain.model_copy(update=updates)
        persist.save_terrain(terrain)
        logger.info(f"Updated terrain fields: {', '.join(sorted(updates))}")

    print(f"\n--- {terrain.name or terrain.id} ---")
    print(f"Description: {terrain.description}")
    print(f"Surface: {terrain.surface}")
    print(f"Coating: {terrain.coating}")
    print(f"Lighting: {'yes' if terrain.lighting else 'no'}")
    print(f"Price per hour: {terrain.price_per_hour:.2f}")
    if terrain.image_url:
        print(f"Image: {terrain.image_url}")
    return terrain


def show_profile(user_id: str, **changes) -> User:
    user = persist.get_user(user_id) or User(id=user_id)
    updates = {k: v for k, v in changes.items() if v is not None}
    if updates:
        user = user.model_copy(update=updates)
        persist.save_user(user)

    print(f"\n--- Profile {user.id} ---")
    print(f"Name: {user.name}")
    print(f"Email: {user.email}")
    print(f"Phone: {user.phone}")
    if user.profile_image_url:
        print(f"Photo: {user.profile_image_url}")
    print(f"Reservations: {len(persist.get_user_reservations(user_id))}")
    return user
