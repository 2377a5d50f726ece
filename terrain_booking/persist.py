import json
import logging
import os
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from pydantic import ValidationError

from terrain_booking import config
from terrain_booking.models import Reservation, ReservationStatus, Terrain, User

logger = logging.getLogger(__name__)


def ensure_data_dir():
    """Ensures the data directory exists."""
    if not os.path.exists(config.DATA_DIR):
        os.makedirs(config.DATA_DIR)


def _load(path: str, key: str):
    """Returns the payload stored under `key`, or None when the file is missing or unreadable."""
    if not os.path.exists(path):
        logger.info(f"No data file found at {path}. Starting fresh.")
        return None
    try:
        with open(path, "r") as f:
            data: Dict = json.load(f)
    except (json.JSONDecodeError, IOError):
        logger.warning(f"Failed to load {path}. Starting fresh.")
        return None
    if not isinstance(data, dict) or key not in data:
        logger.warning(f"{path} has unexpected format. Starting fresh.")
        return None
    logger.debug(f"Loaded {path}, last updated: {data.get('last_updated')}")
    return data[key]


def _save(path: str, key: str, payload):
    ensure_data_dir()
    try:
        data = {"last_updated": datetime.now(timezone.utc).isoformat(), key: payload}
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved {key} to {path}")
    except IOError as e:
        logger.error(f"Failed to save {key}: {e}")


# --- Reservations ---


def load_reservations() -> List[Reservation]:
    """Loads every reservation ever made, cancelled ones included."""
    raw = _load(config.RESERVATIONS_FILE, "reservations") or []
    if not isinstance(raw, list):
        logger.warning("Reservations file has unexpected format. Starting fresh.")
        return []
    reservations = []
    for item in raw:
        try:
            reservations.append(Reservation.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed reservation {item.get('id') if isinstance(item, dict) else item}: {e}")
    return reservations


def save_reservations(reservations: List[Reservation]):
    _save(config.RESERVATIONS_FILE, "reservations", [r.model_dump(mode="json") for r in reservations])


def get_reservations_for_date(day: date, terrain_id: str) -> List[Reservation]:
    """Returns the confirmed reservations of one terrain on one date."""
    return [
        r
        for r in load_reservations()
        if r.date == day and r.terrain_id == terrain_id and r.status == ReservationStatus.CONFIRMED
    ]


def get_user_reservations(subject_id: str) -> List[Reservation]:
    reservations = [r for r in load_reservations() if r.subject_id == subject_id]
    return sorted(reservations, key=lambda r: (r.date, r.interval.start))


def add_reservation(reservation: Reservation):
    reservations = load_reservations()
    reservations.append(reservation)
    save_reservations(reservations)


def cancel_reservation(reservation_id: str) -> Optional[Reservation]:
    """Marks a reservation as cancelled. Reservations are kept for history, never removed."""
    reservations = load_reservations()
    for i, r in enumerate(reservations):
        if r.id != reservation_id:
            continue
        if r.is_cancelled:
            logger.info(f"Reservation {reservation_id} is already cancelled.")
            return r
        cancelled = r.model_copy(update={"status": ReservationStatus.CANCELLED})
        reservations[i] = cancelled
        save_reservations(reservations)
        return cancelled

    logger.warning(f"Reservation {reservation_id} not found.")
    return None


# --- Terrain ---


def load_terrain() -> Terrain:
    """Loads the terrain metadata, falling back to the configured defaults."""
    raw = _load(config.TERRAIN_FILE, "terrain")
    if raw:
        try:
            return Terrain.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Terrain file is invalid, using defaults: {e}")
    return Terrain(id=config.TERRAIN_ID, name=config.TERRAIN_NAME, price_per_hour=config.DEFAULT_PRICE_PER_HOUR)


def save_terrain(terrain: Terrain):
    _save(config.TERRAIN_FILE, "terrain", terrain.model_dump(mode="json"))


# --- Users ---


def _load_users() -> Dict[str, Dict]:
    raw = _load(config.USERS_FILE, "users") or {}
    if not isinstance(raw, dict):
        logger.warning("Users file has unexpected format. Starting fresh.")
        return {}
    return raw


def get_user(user_id: str) -> Optional[User]:
    raw = _load_users().get(user_id)
    if raw is None:
        return None
    try:
        return User.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"User {user_id} is invalid: {e}")
        return None


def save_user(user: User):
    users = _load_users()
    users[user.id] = user.model_dump(mode="json")
    _save(config.USERS_FILE, "users", users)
