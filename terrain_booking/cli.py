import argparse
import logging
import sys

from terrain_booking import run

# --- Logging Setup ---

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    """Sends booking logs to stderr, stamped in the terrain's local time.

    HTTP chatter from the Telegram client is only shown with --verbose.
    """
    import time

    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    # Use local time instead of UTC for logging
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Book time slots on the terrain.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    slots = sub.add_parser("slots", help="Show free and booked slots for a date.")
    slots.add_argument("--date", type=str, help="Date in YYYY-MM-DD format. Defaults to today.")

    book = sub.add_parser("book", help="Book a slot.")
    book.add_argument("--date", type=str, required=True, help="Date in YYYY-MM-DD format.")
    book.add_argument("--start", type=str, required=True, help="Start time in HH:MM format.")
    book.add_argument("--duration", type=int, default=60, help="Duration in minutes. Defaults to 60.")
    book.add_argument("--user", type=str, required=True, help="Id of the person booking.")

    cancel = sub.add_parser("cancel", help="Cancel a reservation.")
    cancel.add_argument("reservation_id", type=str)
    cancel.add_argument("--user", type=str, help="Only cancel if the reservation belongs to this user.")

    reservations = sub.add_parser("reservations", help="List a user's reservations.")
    reservations.add_argument("--user", type=str, required=True)

    terrain = sub.add_parser("terrain", help="Show the terrain, or edit it when options are given.")
    terrain.add_argument("--name", type=str)
    terrain.add_argument("--description", type=str)
    terrain.add_argument("--surface", type=str)
    terrain.add_argument("--coating", type=str)
    terrain.add_argument("--lighting", action=argparse.BooleanOptionalAction, default=None)
    terrain.add_argument("--price-per-hour", type=float)
    terrain.add_argument("--image-url", type=str)

    profile = sub.add_parser("profile", help="Show a user's profile, or edit it when options are given.")
    profile.add_argument("--user", type=str, required=True)
    profile.add_argument("--name", type=str)
    profile.add_argument("--email", type=str)
    profile.add_argument("--phone", type=str)
    profile.add_argument("--image-url", type=str)

    return parser.parse_args(argv)


def main():
    args = parse_arguments()
    setup_logging(args.verbose)

    if args.command == "slots":
        run.show_slots(args.date)
    elif args.command == "book":
        if not run.book(args.date, args.start, args.duration, args.user):
            sys.exit(1)
    elif args.command == "cancel":
        if not run.cancel(args.reservation_id, args.user):
            sys.exit(1)
    elif args.command == "reservations":
        run.list_reservations(args.user)
    elif args.command == "terrain":
        run.show_terrain(
            name=args.name,
            description=args.description,
            surface=args.surface,
            coating=args.coating,
            lighting=args.lighting,
            price_per_hour=args.price_per_hour,
            image_url=args.image_url,
        )
    elif args.command == "profile":
        run.show_profile(
            args.user,
            name=args.name,
            email=args.email,
            phone=args.phone,
            profile_image_url=args.image_url,
        )


if __name__ == "__main__":
    main()
