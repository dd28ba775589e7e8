"""Command-line front end for StaffDesk.

Every command restores the persisted session, asks the router for the view it
belongs to and only then talks to the API, so the same gate that guards the
web views guards the shell. Output is JSON on stdout; problems go to stderr.

Exit codes: 0 success, 1 application error, 2 no response from the server,
3 the gate sent us elsewhere (login required, admin only, session expired).
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
from pydantic import ValidationError

from . import __version__
from .client.errors import ApiError, ServiceUnavailable, SessionExpired
from .client.gate import Router
from .client.geo import GeoReading, StaticPositionProvider, maps_url
from .client.http import ApiClient
from .client.listing import Contains, filter_and_sort
from .client.notify import Notifier
from .client.services import Services
from .client.session import SessionStore
from .client.storage import LocalStorage
from .client.tracking import CheckInFlow
from .core.config import settings
from .core.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NETWORK = 2
EXIT_REDIRECTED = 3


class Context:
    def __init__(self, api: ApiClient, out=None, err=None) -> None:
        self.api = api
        self.session = SessionStore(api)
        self.router = Router(self.session, session_invalidated=api.session_invalidated)
        self.services = Services(api)
        self.notifier = Notifier()
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def emit(self, value: Any) -> None:
        print(json.dumps(value, indent=2, default=str), file=self.out)

    def complain(self, message: str) -> None:
        print(message, file=self.err)


Command = Callable[[Context, argparse.Namespace], Awaitable[int]]


# ---- commands
async def cmd_login(ctx: Context, args: argparse.Namespace) -> int:
    email = args.email or input("Email: ").strip()
    password = args.password or getpass.getpass("Password: ")
    result = await ctx.session.login(email, password)
    if not result.success:
        ctx.complain(result.error or "Login failed")
        return EXIT_ERROR
    ctx.router.navigate("/")
    ctx.emit({"status": "signed-in", "user": ctx.session.identity.to_wire()})
    return EXIT_OK


async def cmd_logout(ctx: Context, args: argparse.Namespace) -> int:
    await ctx.session.sign_out()
    ctx.router.navigate("/login")
    ctx.emit({"status": "signed-out"})
    return EXIT_OK


async def cmd_whoami(ctx: Context, args: argparse.Namespace) -> int:
    ctx.emit(ctx.session.identity.to_wire())
    return EXIT_OK


async def cmd_employees(ctx: Context, args: argparse.Namespace) -> int:
    response = await ctx.services.employees.list()
    rows = filter_and_sort(
        response.data or [],
        {"name|email": Contains(args.search or ""), "department": args.department},
        sort_by="name",
        order="asc",
    )
    ctx.emit(rows)
    return EXIT_OK


async def cmd_documents(ctx: Context, args: argparse.Namespace) -> int:
    response = await ctx.services.documents.list()
    filters = {
        "verificationStatus": args.status,
        "type": args.type,
        "employeeName": Contains(args.employee or ""),
    }
    ctx.emit(filter_and_sort(response.data or [], filters, sort_by=args.sort, order=args.order))
    return EXIT_OK


async def cmd_upload(ctx: Context, args: argparse.Namespace) -> int:
    path = Path(args.path)
    try:
        handle = path.open("rb")
    except OSError as exc:
        ctx.complain(f"upload: cannot read {path}: {exc.strerror or exc}")
        return EXIT_ERROR
    with handle:
        response = await ctx.services.documents.upload(handle, doc_type=args.type, name=args.name, filename=path.name)
    ctx.emit(response.data)
    return EXIT_OK


async def cmd_checkin(ctx: Context, args: argparse.Namespace) -> int:
    provider = StaticPositionProvider(GeoReading(args.lat, args.lon, args.accuracy))
    flow = CheckInFlow(ctx.services.locations, ctx.api.storage, provider, notifier=ctx.notifier)
    record = await flow.check_in(device=args.device)
    # A shell command does not outlive its process; tracking stops here.
    await flow.tracker.stop()
    return _report(ctx, record)


async def cmd_checkout(ctx: Context, args: argparse.Namespace) -> int:
    flow = CheckInFlow(ctx.services.locations, ctx.api.storage, None, notifier=ctx.notifier)
    return _report(ctx, await flow.check_out(args.id))


async def cmd_locations(ctx: Context, args: argparse.Namespace) -> int:
    response = await ctx.services.locations.list()
    rows = filter_and_sort(response.data or [], {"status": args.status}, sort_by="checkInTime", order="desc")
    for row in rows:
        row["mapUrl"] = maps_url(row["latitude"], row["longitude"])
    ctx.emit(rows)
    return EXIT_OK


async def cmd_tickets(ctx: Context, args: argparse.Namespace) -> int:
    response = await ctx.services.help_center.list(status=args.status, priority=args.priority, category=args.category)
    ctx.emit(response.data)
    return EXIT_OK


async def cmd_ticket(ctx: Context, args: argparse.Namespace) -> int:
    response = await ctx.services.help_center.create(
        {"subject": args.subject, "message": args.message, "priority": args.priority, "category": args.category}
    )
    ctx.emit(response.data)
    return EXIT_OK


async def cmd_payments(ctx: Context, args: argparse.Namespace) -> int:
    if args.summary:
        response = await ctx.services.payment_records.my_summary()
    else:
        response = await ctx.services.payment_records.list(status=args.status)
    ctx.emit(response.data)
    return EXIT_OK


def _report(ctx: Context, record: Any) -> int:
    notice = ctx.notifier.last
    if notice is not None and notice.level == "error":
        ctx.complain(notice.message)
    if record is None:
        return EXIT_ERROR
    ctx.emit(record)
    return EXIT_OK


# (command, route it belongs to, handler)
ROUTED: dict[str, tuple[str, Command]] = {
    "login": ("/login", cmd_login),
    "logout": ("/login", cmd_logout),
    "whoami": ("/profile", cmd_whoami),
    "employees": ("/employees", cmd_employees),
    "documents": ("/documents", cmd_documents),
    "upload": ("/documents", cmd_upload),
    "checkin": ("/locations", cmd_checkin),
    "checkout": ("/locations", cmd_checkout),
    "locations": ("/locations", cmd_locations),
    "tickets": ("/help-center", cmd_tickets),
    "ticket": ("/help-center", cmd_ticket),
    "payments": ("/payment-records", cmd_payments),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="staffdesk", description="StaffDesk employee management client.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--base-url", default=None, help="API base URL (default: API_URL / STAFFDESK_API_URL).")
    parser.add_argument("--storage", default=None, help="Session storage file (default: DATA_DIR/storage.json).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests to stderr.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Sign in and remember the session.")
    p.add_argument("--email")
    p.add_argument("--password")

    sub.add_parser("logout", help="Forget the stored session.")
    sub.add_parser("whoami", help="Show the signed-in user.")

    p = sub.add_parser("employees", help="List employees (admin).")
    p.add_argument("--search", help="Match against name or email.")
    p.add_argument("--department")

    p = sub.add_parser("documents", help="List documents.")
    p.add_argument("--status", choices=["all", "pending", "verified", "rejected"], default="all")
    p.add_argument("--type", default="all")
    p.add_argument("--employee", help="Match against the owning employee's name.")
    p.add_argument("--sort", default="createdAt")
    p.add_argument("--order", choices=["asc", "desc"], default="desc")

    p = sub.add_parser("upload", help="Upload a document.")
    p.add_argument("path")
    p.add_argument("--type", required=True)
    p.add_argument("--name")

    p = sub.add_parser("checkin", help="Check in at a position.")
    p.add_argument("--lat", type=float, required=True)
    p.add_argument("--lon", type=float, required=True)
    p.add_argument("--accuracy", type=float, default=None)
    p.add_argument("--device", default=None)

    p = sub.add_parser("checkout", help="Check out of a check-in record.")
    p.add_argument("id", type=int)

    p = sub.add_parser("locations", help="List check-in records.")
    p.add_argument("--status", choices=["all", "checked-in", "checked-out"], default="all")

    p = sub.add_parser("tickets", help="List help tickets.")
    p.add_argument("--status")
    p.add_argument("--priority")
    p.add_argument("--category")

    p = sub.add_parser("ticket", help="Open a help ticket.")
    p.add_argument("subject")
    p.add_argument("message")
    p.add_argument("--priority", default="medium")
    p.add_argument("--category", default="general")

    p = sub.add_parser("payments", help="List payment records.")
    p.add_argument("--status")
    p.add_argument("--summary", action="store_true", help="Show my payment summary instead.")

    p = sub.add_parser("serve", help="Run the API server.")
    p.add_argument("--host", default=settings.HOST)
    p.add_argument("--port", type=int, default=settings.PORT)
    p.add_argument("--reload", action="store_true")
    return parser


async def run(
    args: argparse.Namespace,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    out=None,
    err=None,
) -> int:
    route, handler = ROUTED[args.command]
    storage = LocalStorage(args.storage or settings.storage_file)
    async with ApiClient(storage, base_url=args.base_url, transport=transport) as api:
        ctx = Context(api, out=out, err=err)
        try:
            await ctx.session.rehydrate()
            navigation = ctx.router.navigate(route)
            if not navigation.rendered or navigation.redirected:
                ctx.complain(f"{args.command}: not available here, redirected to {navigation.path}")
                return EXIT_REDIRECTED
            return await handler(ctx, args)
        except SessionExpired:
            ctx.complain(f"Session expired; now at {ctx.router.current_path}. Please log in again.")
            return EXIT_REDIRECTED
        except ServiceUnavailable:
            ctx.complain("No response from server. Please check if backend is running.")
            return EXIT_NETWORK
        except ApiError as exc:
            ctx.complain(f"{args.command} failed: {exc.message}")
            return EXIT_ERROR
        except ValidationError as exc:
            ctx.complain(f"{args.command}: invalid input: {exc.errors()[0].get('msg')}")
            return EXIT_ERROR


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("staffdesk.main:build_default_app", factory=True, host=args.host, port=args.port, reload=args.reload)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING", json_output=False)
    if args.command == "serve":
        return serve(args)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
