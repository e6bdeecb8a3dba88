"""Command-line client for SocialFlood: connections and multi-platform publishing."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys
import webbrowser
from pathlib import Path
from typing import TYPE_CHECKING, Any

from socialflood.config import Settings
from socialflood.exceptions import SocialFloodError
from socialflood.platforms.registry import (
    PLATFORMS,
    available_platforms,
    descriptor,
    parse_platform,
)
from socialflood.services import post_service
from socialflood.services.connection_service import ConnectionStatusAggregator
from socialflood.services.datetime_service import format_iso
from socialflood.services.oauth_service import OAuthPopupCoordinator
from socialflood.services.pending_connect_store import PendingConnectStore
from socialflood.services.publish_service import PublishOrchestrator, publish_failures
from socialflood.transport.auth import SessionAuthClient
from socialflood.transport.http import ApiClient
from socialflood.transport.publisher import PlatformPublisher
from socialflood.transport.registry import get_transport

if TYPE_CHECKING:
    from socialflood.schemas.connection import Connection
    from socialflood.schemas.post import PostPackage
    from socialflood.services.connection_service import ConnectionSnapshot

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure CLI logging."""
    level = logging.DEBUG if debug else logging.WARNING
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stderr,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.INFO if debug else logging.WARNING)


def build_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, overridden by command-line flags."""
    overrides: dict[str, Any] = {}
    if args.server:
        overrides["api_base_url"] = args.server
    if args.user_id:
        overrides["user_id"] = args.user_id
    if args.cookie:
        overrides["session_cookie"] = args.cookie
    if args.legacy:
        overrides["auth_mode"] = "legacy"
    if args.allow_insecure_http:
        overrides["allow_insecure_http"] = True
    if args.debug:
        overrides["debug"] = True
    return Settings(**overrides)


def load_package(path: Path) -> PostPackage:
    """Build a post package from a JSON file.

    The file maps platform names to variants::

        {"platforms": {"twitter": {"content": "...", "media": ["https://..."]},
                       "pinterest": {"content": "...", "media": ["..."],
                                     "options": {"board_id": "b1", "title": "T"}},
                       "linkedin": {"content": "...", "enabled": false}}}

    Raises ValueError on a malformed file or unknown platform.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    entries = data.get("platforms") if isinstance(data, dict) else None
    if not isinstance(entries, dict) or not entries:
        raise ValueError(f"{path} must contain a non-empty 'platforms' object")

    variants = {parse_platform(name): entry for name, entry in entries.items()}
    package = post_service.create_package(variants)
    for platform, entry in variants.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Entry for {platform.value} must be an object")
        package = post_service.set_content(package, platform, str(entry.get("content", "")))
        media = [str(m) for m in entry.get("media", [])]
        package = post_service.set_media(package, platform, media)
        for key, value in (entry.get("options") or {}).items():
            package = post_service.set_option(package, platform, key, str(value))
        package = post_service.toggle(package, platform, bool(entry.get("enabled", True)))
    return package


def _format_connection(conn: Connection) -> str:
    state = "active" if conn.is_active else "inactive"
    if conn.is_expired():
        state += ", expired"
    return f"{conn.label} [{state}] id={conn.id} expires={format_iso(conn.expires_at)}"


def _print_snapshot(snap: ConnectionSnapshot) -> None:
    name = descriptor(snap.platform).display_name
    if snap.fetch_error is not None:
        print(f"  {name:<12} error ({snap.fetch_error.value}): {snap.error_message}")
        return
    if not snap.connections:
        print(f"  {name:<12} not connected")
        return
    for conn in snap.connections:
        print(f"  {name:<12} {_format_connection(conn)}")


def _print_progress(package: PostPackage) -> None:
    logger.debug(
        "Package %s: %s",
        package.status,
        ", ".join(f"{p.value}={v.status}" for p, v in package.enabled_variants().items()),
    )


def cmd_platforms() -> None:
    print("Platforms:")
    for platform, desc in PLATFORMS.items():
        suffix = "" if desc.available else " (coming soon)"
        print(
            f"  {platform.value:<10} {desc.display_name:<12} "
            f"max {desc.max_content_length} chars, {desc.max_media_items} media{suffix}"
        )


async def cmd_status(aggregator: ConnectionStatusAggregator, args: argparse.Namespace) -> None:
    platforms = [parse_platform(p) for p in args.platform] if args.platform else None
    await aggregator.refresh(platforms, args.user_id_resolved)
    print(f"Connections ({aggregator.active_count()} active):")
    for snap in aggregator.snapshots.values():
        _print_snapshot(snap)


async def cmd_connect(coordinator: OAuthPopupCoordinator, args: argparse.Namespace) -> None:
    platform = parse_platform(args.platform)
    url = coordinator.begin_connect(platform, args.user_id_resolved)
    print(f"Opened {url}")
    if args.no_wait:
        return
    await asyncio.to_thread(input, "Press Enter once you have finished in the browser...")
    result = await coordinator.reconcile(args.user_id_resolved)
    if platform in result.completed:
        print(f"{descriptor(platform).display_name} connected.")
    else:
        print(f"{descriptor(platform).display_name} is not connected yet.")


async def cmd_publish(
    aggregator: ConnectionStatusAggregator,
    orchestrator: PublishOrchestrator,
    args: argparse.Namespace,
) -> bool:
    package = load_package(Path(args.file))
    if args.check:
        results = post_service.validate_package(package)
        for platform, result in results.items():
            name = descriptor(platform).display_name
            print(f"  {name:<12} {'ok' if result.is_valid else '; '.join(result.messages)}")
        return all(r.is_valid for r in results.values())

    snapshots = await aggregator.refresh(
        list(package.enabled_variants()), args.user_id_resolved
    )
    package = await orchestrator.publish(
        package, connections=snapshots, on_update=_print_progress
    )
    print(f"Package {package.id}: {package.status}")
    for platform, variant in package.enabled_variants().items():
        name = descriptor(platform).display_name
        if variant.status == "success":
            print(f"  {name:<12} posted {variant.platform_post_id or variant.post_id or ''}")
    for failure in publish_failures(package):
        print(f"  {descriptor(failure.platform).display_name:<12} failed: {failure.message}")
    return package.status == "success"


async def cmd_login(api: ApiClient, settings: Settings, args: argparse.Namespace) -> None:
    auth = SessionAuthClient(api)
    password = getpass.getpass("Password: ")
    session = await auth.sign_in(args.email, password)
    print(f"Signed in as {session.user.email}")
    token = api.client.cookies.get(settings.session_cookie_name)
    if token:
        print(f"export SOCIALFLOOD_SESSION_COOKIE='{token}'")


async def cmd_whoami(api: ApiClient) -> None:
    session = await SessionAuthClient(api).current_session()
    if session is None:
        print("Not signed in")
    else:
        print(f"{session.user.name} <{session.user.email}>")


async def run(args: argparse.Namespace, settings: Settings) -> bool:
    """Execute one command. Returns False when the command partly failed."""
    async with ApiClient.from_settings(settings) as api:
        if args.command == "login":
            await cmd_login(api, settings, args)
            return True
        if args.command == "whoami":
            await cmd_whoami(api)
            return True
        if args.command == "logout":
            await SessionAuthClient(api).sign_out()
            print("Signed out")
            return True

        transport = get_transport(settings.auth_mode, api)
        aggregator = ConnectionStatusAggregator(transport)

        if args.command == "status":
            await cmd_status(aggregator, args)
        elif args.command == "connect":
            store = PendingConnectStore(ttl_seconds=settings.pending_connect_ttl_seconds)
            coordinator = OAuthPopupCoordinator(
                aggregator, transport, store=store, opener=webbrowser.open_new
            )
            await cmd_connect(coordinator, args)
        elif args.command == "disconnect":
            await aggregator.disconnect(args.connection_id)
            print(f"Disconnected {args.connection_id}")
        elif args.command == "refresh":
            conn = await aggregator.refresh_one(args.connection_id)
            print(f"Refreshed {conn.platform.value}: {_format_connection(conn)}")
        elif args.command == "details":
            conn = await aggregator.details(args.connection_id)
            print(f"{conn.platform.value}: {_format_connection(conn)}")
            if conn.scopes:
                print(f"  scopes: {', '.join(sorted(conn.scopes))}")
        elif args.command == "publish":
            orchestrator = PublishOrchestrator(PlatformPublisher(api))
            return await cmd_publish(aggregator, orchestrator, args)
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="socialflood",
        description="Connect social accounts and publish to several platforms at once",
    )
    parser.add_argument("--server", "-s", help="API base URL (default: SOCIALFLOOD_API_BASE_URL)")
    parser.add_argument("--user-id", "-u", help="User id for legacy per-user endpoints")
    parser.add_argument(
        "--cookie", help="Session cookie value (default: SOCIALFLOOD_SESSION_COOKIE)"
    )
    parser.add_argument(
        "--legacy", action="store_true", help="Use the legacy /auth/{platform} endpoints"
    )
    parser.add_argument(
        "--allow-insecure-http",
        action="store_true",
        help="Allow http:// server URLs for non-localhost hosts",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("platforms", help="List supported platforms")

    status = subparsers.add_parser("status", help="Show connection status")
    status.add_argument(
        "--platform", "-p", action="append", help="Limit to a platform (repeatable)"
    )

    connect = subparsers.add_parser("connect", help="Connect a platform account in the browser")
    connect.add_argument("platform", choices=[p.value for p in available_platforms()])
    connect.add_argument(
        "--no-wait", action="store_true", help="Do not wait to confirm the connection"
    )

    for name, help_text in (
        ("disconnect", "Remove a connection"),
        ("refresh", "Refresh a connection's tokens"),
        ("details", "Show one connection"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("connection_id")

    publish = subparsers.add_parser("publish", help="Publish a post package from a JSON file")
    publish.add_argument("file")
    publish.add_argument("--check", action="store_true", help="Validate only, do not publish")

    login = subparsers.add_parser("login", help="Sign in and print the session cookie")
    login.add_argument("email")
    subparsers.add_parser("logout", help="End the current session")
    subparsers.add_parser("whoami", help="Show the signed-in user")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return
    if args.command == "platforms":
        cmd_platforms()
        return

    try:
        settings = build_settings(args)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    _configure_logging(settings.debug)
    args.user_id_resolved = settings.user_id

    try:
        ok = asyncio.run(run(args, settings))
    except (SocialFloodError, ValueError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
