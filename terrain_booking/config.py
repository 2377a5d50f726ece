import logging
import os
from datetime import datetime
from typing import Tuple

from terrain_booking.models import FacilitySchedule

logger = logging.getLogger(__name__)

# --- File Paths ---
DATA_DIR = os.environ.get("DATA_DIR", "data")
RESERVATIONS_FILE = os.path.join(DATA_DIR, "reservations.json")
TERRAIN_FILE = os.path.join(DATA_DIR, "terrain.json")
USERS_FILE = os.path.join(DATA_DIR, "users.json")

# --- Facility ---
TERRAIN_ID = os.environ.get("TERRAIN_ID", "terrain-1")
TERRAIN_NAME = os.environ.get("TERRAIN_NAME", "Terrain Polyvalent")
DEFAULT_PRICE_PER_HOUR = float(os.environ.get("DEFAULT_PRICE_PER_HOUR", "40"))

OPERATING_START = os.environ.get("OPERATING_START", "08:00")  # HH:MM, local time
OPERATING_END = os.environ.get("OPERATING_END", "22:00")  # HH:MM, local time
SLOT_GRANULARITY_MINUTES = int(os.environ.get("SLOT_GRANULARITY_MINUTES", "60"))
ALLOWED_DURATIONS_RAW = os.environ.get("ALLOWED_DURATIONS", "30,60,90,120,150,180")

# --- Telegram ---
TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")
if not TELEGRAM_BOT_TOKEN or not TELEGRAM_CHAT_ID:
    logger.warning("Telegram configuration incomplete. Skipping notifications.")


def parse_durations(raw: str) -> Tuple[int, ...]:
    """Parses a comma-separated list of minutes, e.g. "30,60,90"."""
    durations = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            durations.append(int(part))
        except ValueError:
            logger.warning(f"Ignoring invalid duration '{part}' in ALLOWED_DURATIONS")
    return tuple(durations)


def get_facility_schedule() -> FacilitySchedule:
    """Builds the facility schedule from the environment-backed settings above."""
    return FacilitySchedule(
        operating_start=datetime.strptime(OPERATING_START, "%H:%M").time(),
        operating_end=datetime.strptime(OPERATING_END, "%H:%M").time(),
        slot_granularity=SLOT_GRANULARITY_MINUTES,
        allowed_durations=parse_durations(ALLOWED_DURATIONS_RAW),
    )
