"""Command-line entry point.

    applist list [--json]           resolve and print every app in the AppList
    applist search [--json] QUERY   search the Steam store
    applist add APPID               add an app id to the AppList
    applist remove APPID            remove an app id from the AppList
    applist set-dir PATH            select the Steam directory
    applist show-dir                print the selected Steam directory

Exit codes: 0 success, 1 operation error, 2 invalid configuration or usage.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from applist import library
from applist.config import Settings
from applist.errors import AppListError
from applist.logging_setup import configure_logging
from applist.state import open_state

if TYPE_CHECKING:
    from applist.models.catalog import AppRecord
    from applist.state import AppState

log = structlog.get_logger()


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if number <= 0:
        raise argparse.ArgumentTypeError("app id must be positive")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="applist", description="Manage the GreenLuma AppList and look up Steam apps."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="resolve and print every app in the AppList")
    list_cmd.add_argument("--json", action="store_true", help="print records as JSON")

    search = commands.add_parser("search", help="search the Steam store")
    search.add_argument("--json", action="store_true", help="print records as JSON")
    search.add_argument("query")

    add = commands.add_parser("add", help="add an app id to the AppList")
    add.add_argument("app_id", type=_positive_int)

    remove = commands.add_parser("remove", help="remove an app id from the AppList")
    remove.add_argument("app_id", type=_positive_int)

    set_dir = commands.add_parser("set-dir", help="select the Steam directory")
    set_dir.add_argument("path", type=Path)

    commands.add_parser("show-dir", help="print the selected Steam directory")
    return parser


def _print_records(records: list[AppRecord], as_json: bool = False) -> None:
    if as_json:
        print(json.dumps([r.model_dump(by_alias=True) for r in records], indent=2))
        return
    for record in records:
        print(f"{record.app_id}\t{record.title}\t{record.thumbnail_url}")


async def _dispatch(state: AppState, args: argparse.Namespace) -> None:
    if args.command == "list":
        _print_records(await library.list_installed(state), args.json)
    elif args.command == "search":
        _print_records(await library.search_apps(state, args.query), args.json)
    elif args.command == "add":
        print(library.add_app(state, args.app_id))
    elif args.command == "remove":
        if library.remove_app(state, args.app_id):
            print(f"removed {args.app_id}")
        else:
            print(f"{args.app_id} is not in the AppList")
    elif args.command == "set-dir":
        print(library.select_steam_dir(state, args.path))
    elif args.command == "show-dir":
        print(library.current_steam_dir(state))


async def _run(settings: Settings, args: argparse.Namespace) -> None:
    async with open_state(settings) as state:
        await _dispatch(state, args)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"invalid configuration:\n{exc}", file=sys.stderr)
        return 2

    configure_logging(settings.logging)

    try:
        asyncio.run(_run(settings, args))
    except AppListError as exc:
        log.debug("command_failed", command=args.command, code=exc.code)
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    return 0
