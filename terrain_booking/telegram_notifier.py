import logging

import requests

from terrain_booking import config
from terrain_booking.models import Reservation, Terrain

logger = logging.getLogger(__name__)


def format_reservation_message(reservation: Reservation, terrain: Terrain, cancelled: bool = False) -> str:
    """Builds the Markdown body announcing a new or cancelled reservation."""
    title = "❌ *Reservation cancelled*" if cancelled else "⚽ *New reservation*"
    who = reservation.subject_name or reservation.subject_id
    lines = [
        title,
        "",
        f"*{terrain.name or terrain.id}*",
        f"{reservation.date:%d/%m/%Y} {reservation.interval}",
        f"By: {who}",
    ]
    if not cancelled and reservation.total_price:
        lines.append(f"Price: {reservation.total_price:.2f}")
    return "\n".join(lines)


def send_telegram_message(message: str) -> bool:
    """Posts a reservation notice to the configured Telegram chat. Returns True when delivered."""
    token = config.TELEGRAM_BOT_TOKEN
    chat_id = config.TELEGRAM_CHAT_ID

    if not token or not chat_id:
        logger.warning("Telegram configuration missing. Reservation notice not sent.")
        return False

    url = f"https://api.telegram.org/bot{token}/sendMessage"
    payload = {
        "chat_id": chat_id,
        "text": message,
        "parse_mode": "Markdown",
        "disable_web_page_preview": True,
    }

    try:
        response = requests.post(url, json=payload, timeout=10)
        response.raise_for_status()
        logger.info("Reservation notice sent to Telegram.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send reservation notice to Telegram: {e}")
        return False
