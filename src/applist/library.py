"""Library operations: the Steam directory's AppList resolved into records."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from applist.config import save_user_config
from applist.errors import AppListError, ErrorCode
from applist.markers import (
    add_app_id,
    applist_dir,
    is_valid_steam_dir,
    read_app_ids,
    remove_app_id,
)

if TYPE_CHECKING:
    from applist.models.catalog import AppRecord
    from applist.state import AppState

log = structlog.get_logger()


def _require_steam_dir(state: AppState) -> Path:
    if not state.user_config.steam_dir:
        raise AppListError(
            ErrorCode.CONFIGURATION_MISSING,
            "No Steam directory selected. Run 'applist set-dir <path>' first.",
        )
    return Path(state.user_config.steam_dir)


def current_steam_dir(state: AppState) -> Path:
    """Return the selected Steam directory if it is still valid."""
    steam_dir = _require_steam_dir(state)
    if not is_valid_steam_dir(steam_dir):
        raise AppListError(
            ErrorCode.DIRECTORY_INVALID,
            f"Steam directory {steam_dir} is missing or has no steam.exe",
        )
    return steam_dir


def select_steam_dir(state: AppState, path: Path) -> Path:
    """Validate ``path`` and persist it as the selected Steam directory."""
    path = path.expanduser().resolve()
    if not is_valid_steam_dir(path):
        raise AppListError(
            ErrorCode.DIRECTORY_INVALID,
            f"There is no steam.exe in {path}",
        )
    if state.user_config.steam_dir != str(path):
        state.user_config = state.user_config.model_copy(update={"steam_dir": str(path)})
        save_user_config(state.user_config_path, state.user_config)
        log.info("steam_dir_selected", path=str(path))
    return path


async def list_installed(state: AppState) -> list[AppRecord]:
    """Resolve every app id in the AppList directory, sorted by app id."""
    steam_dir = _require_steam_dir(state)
    app_ids = read_app_ids(applist_dir(steam_dir))
    records = await state.resolver.resolve_all(app_ids)
    return sorted(records, key=lambda r: r.app_id)


async def search_apps(state: AppState, query: str) -> list[AppRecord]:
    return await state.catalog.search(query)


def add_app(state: AppState, app_id: int) -> Path:
    steam_dir = _require_steam_dir(state)
    return add_app_id(applist_dir(steam_dir), app_id)


def remove_app(state: AppState, app_id: int) -> bool:
    """Disable ``app_id``. Returns False when it was not in the AppList."""
    steam_dir = _require_steam_dir(state)
    return remove_app_id(applist_dir(steam_dir), app_id)
