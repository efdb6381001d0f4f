#!/usr/bin/env python3
"""
Command-line front end for the booking client.

Usage:
    booking-client login alice
    booking-client branches
    booking-client reserve --branch 1 --start 2030-01-01T10:00 --end 2030-01-01T11:00 --item 5
    booking-client admin-requests list --status PENDING
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from .auth import Affordance
from .booking import DraftLine, validate_registration
from .client import BookingClient
from .config import ClientConfig, configure_logging
from .errors import BookingClientError
from .models import ItemType, ProviderRequestStatus


# command -> (required role, login required)
ROUTE_REQUIREMENTS = {
    "reserve": (None, True),
    "reservations": (None, True),
    "provider-request": (None, True),
    "my-branches": ("PROVIDER", True),
    "admin-requests": ("ADMIN", True),
}


def _parse_item(value: str) -> Tuple[str, str]:
    """``ITEM`` or ``ITEM:QTY``."""
    item_id, _, quantity = value.partition(":")
    return item_id, quantity or "1"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="booking-client", description="Booking platform client")
    parser.add_argument("--api-url", help="Gateway base URL (default: $BOOKING_API_BASE_URL)")
    parser.add_argument("--auth-url", help="Auth service base URL (default: $BOOKING_AUTH_BASE_URL)")
    parser.add_argument("--token-file", type=Path, help="Session file (default: $BOOKING_TOKEN_FILE)")
    parser.add_argument("--log-level", help="Log level (default: $BOOKING_LOG_LEVEL or INFO)")

    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Log in and store the session")
    login.add_argument("username")
    login.add_argument("--password", help="Prompted for if omitted")

    register = sub.add_parser("register", help="Create an account and log in")
    register.add_argument("username")
    register.add_argument("email")
    register.add_argument("--password", help="Prompted for if omitted")
    register.add_argument("--provider", action="store_true", help="Register as a provider")

    sub.add_parser("logout", help="Forget the stored session")
    sub.add_parser("whoami", help="Show the current session")
    sub.add_parser("branches", help="List branches")

    items = sub.add_parser("items", help="List items")
    items.add_argument("--branch", type=int)
    items.add_argument("--type", choices=[t.value for t in ItemType])

    reserve = sub.add_parser("reserve", help="Create a reservation")
    reserve.add_argument("--branch", required=True)
    reserve.add_argument("--start", required=True, help="e.g. 2030-01-01T10:00")
    reserve.add_argument("--end", required=True)
    reserve.add_argument("--item", action="append", required=True, metavar="ITEM[:QTY]")

    sub.add_parser("reservations", help="List my reservations")

    provider_request = sub.add_parser("provider-request", help="Request or check provider access")
    provider_request.add_argument("action", choices=["submit", "status"])

    admin = sub.add_parser("admin-requests", help="Review provider requests (ADMIN)")
    admin_sub = admin.add_subparsers(dest="admin_action", required=True)
    admin_list = admin_sub.add_parser("list")
    admin_list.add_argument("--status", choices=[s.value for s in ProviderRequestStatus] + ["ALL"], default="PENDING")
    for name in ("approve", "reject"):
        decision = admin_sub.add_parser(name)
        decision.add_argument("request_id", type=int)

    sub.add_parser("my-branches", help="List my branches (PROVIDER)")
    return parser


def build_config(args: argparse.Namespace) -> ClientConfig:
    config = ClientConfig.from_env()
    return ClientConfig(
        api_base_url=args.api_url or config.api_base_url,
        auth_base_url=args.auth_url or config.auth_base_url,
        token_file=args.token_file or config.token_file,
        timeout=config.timeout,
        logout_on_unauthorized=config.logout_on_unauthorized,
        log_level=(args.log_level or config.log_level).upper(),
    )


async def run_command(client: BookingClient, args: argparse.Namespace) -> int:
    command = args.command

    if command in ROUTE_REQUIREMENTS:
        required_role, require_login = ROUTE_REQUIREMENTS[command]
        decision = client.guard.check(required_role, require_login)
        if not decision.allowed:
            print(f"Not allowed here; redirecting to {decision.path}")
            return 1

    if command == "login":
        password = args.password or getpass.getpass("Password: ")
        session = await client.auth.login(args.username, password)
        print(f"Logged in as {session.username}")

    elif command == "register":
        password = args.password or getpass.getpass("Password: ")
        request = validate_registration(
            args.username, args.email, password, "PROVIDER" if args.provider else "USER"
        )
        session = await client.auth.register(request)
        print(f"Account created; logged in as {session.username}")

    elif command == "logout":
        client.logout()
        print("Logged out")

    elif command == "whoami":
        state = client.session.state
        if not state.is_authenticated:
            print("Not logged in")
        else:
            print(f"User:    {state.username}")
            print(f"User id: {state.user_id if state.user_id is not None else '-'}")
            print(f"Roles:   {', '.join(sorted(state.roles)) or '-'}")
            panel = client.guard.affordance()
            if panel != Affordance.NEITHER:
                print(f"Panel:   {panel.value}")

    elif command == "branches":
        for branch in await client.catalog.list_branches():
            print(f"{branch.id:>4}  {branch.name}  ({branch.address})")

    elif command == "items":
        item_type = ItemType(args.type) if args.type else None
        for item in await client.catalog.list_items(args.branch, item_type):
            print(
                f"{item.id:>4}  {item.name}  {item.type.value}/{item.rental_mode.value}"
                f"  ${item.base_price}  stock {item.quantity_total if item.quantity_total is not None else '-'}"
            )

    elif command == "reserve":
        form = client.reservation_form()
        await form.select_branch(args.branch)
        form.set_window(args.start, args.end)
        form.draft.lines = [DraftLine(*_parse_item(value)) for value in args.item]
        reservation = await form.submit()
        print(f"Reservation {reservation.id} created ({reservation.status.value})")

    elif command == "reservations":
        for reservation in await client.booking.my_reservations():
            print(
                f"{reservation.id:>4}  branch {reservation.branch_id}  "
                f"{reservation.start_at:%Y-%m-%d %H:%M} - {reservation.end_at:%H:%M}  {reservation.status.value}"
            )

    elif command == "provider-request":
        tracker = client.provider_request_tracker()
        await tracker.refresh()
        if args.action == "submit":
            await tracker.submit()
        print(tracker.status_message)

    elif command == "admin-requests":
        review = client.provider_request_review()
        if args.admin_action == "list":
            status = None if args.status == "ALL" else ProviderRequestStatus(args.status)
            requests = await review.load(status)
        elif args.admin_action == "approve":
            requests = await review.approve(args.request_id)
        else:
            requests = await review.reject(args.request_id)
        for request in requests:
            print(f"#{request.id:<4} user {request.user_id}  {request.status.value}")

    elif command == "my-branches":
        panel = client.provider_panel()
        for branch in await panel.load_branches():
            print(f"{branch.id:>4}  {branch.name}  ({branch.address})")

    return 0


async def _main(args: argparse.Namespace, config: ClientConfig) -> int:
    async with BookingClient(config) as client:
        try:
            return await run_command(client, args)
        except BookingClientError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = build_config(args)
    configure_logging(config.log_level)
    logger.debug(f"Using gateway {config.api_base_url}, auth {config.auth_base_url}")

    try:
        return asyncio.run(_main(args, config))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
