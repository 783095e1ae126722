"""GreenLuma ``AppList`` marker files.

Each ``<index>.txt`` file in the AppList directory holds one decimal app id.
The file name is only a slot number; the id is the file's content.
"""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from applist.errors import AppListError, ErrorCode

log = structlog.get_logger()

APPLIST_DIRNAME = "AppList"
STEAM_EXECUTABLE = "steam.exe"
MARKER_SUFFIX = ".txt"


def applist_dir(steam_dir: Path) -> Path:
    return steam_dir / APPLIST_DIRNAME


def is_valid_steam_dir(path: Path) -> bool:
    """A Steam directory is one that contains ``steam.exe``."""
    return (path / STEAM_EXECUTABLE).is_file()


def _marker_files(directory: Path) -> list[Path]:
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix == MARKER_SUFFIX
    )


def _read_marker(path: Path) -> int | None:
    try:
        text = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        log.warning("marker_read_error", path=str(path), exc_info=True)
        return None
    try:
        app_id = int(text)
    except ValueError:
        log.debug("marker_not_numeric", path=str(path))
        return None
    return app_id if app_id > 0 else None


def read_markers(directory: Path) -> dict[int, Path]:
    """Map app id -> marker file. Absent directories yield an empty mapping."""
    try:
        files = _marker_files(directory)
    except FileNotFoundError:
        return {}
    except OSError:
        log.warning("applist_dir_read_error", path=str(directory), exc_info=True)
        return {}

    markers: dict[int, Path] = {}
    for path in files:
        app_id = _read_marker(path)
        if app_id is not None:
            markers.setdefault(app_id, path)
    return markers


def read_app_ids(directory: Path) -> set[int]:
    return set(read_markers(directory))


def add_app_id(directory: Path, app_id: int) -> Path:
    """Write ``app_id`` into the next free marker slot and return its path.

    Already-present ids are left alone and their existing file is returned.
    """
    existing = read_markers(directory)
    if app_id in existing:
        return existing[app_id]

    try:
        directory.mkdir(parents=True, exist_ok=True)
        index = sum(1 for _ in directory.iterdir())
        target = directory / f"{index}{MARKER_SUFFIX}"
        while target.exists():
            index += 1
            target = directory / f"{index}{MARKER_SUFFIX}"
        target.write_text(str(app_id), encoding="utf-8")
    except OSError as exc:
        raise AppListError(
            ErrorCode.MARKER_WRITE_FAILED,
            f"Could not add app {app_id} to {directory}: {exc}",
        ) from exc

    log.info("marker_added", app_id=app_id, path=str(target))
    return target


def _slot_order(path: Path) -> tuple[int, int, str]:
    if path.stem.isdigit():
        return (0, int(path.stem), path.name)
    return (1, 0, path.name)


def remove_app_id(directory: Path, app_id: int) -> bool:
    """Delete the marker for ``app_id`` and renumber the rest to ``0..n-1``.

    Returns False when the id is not listed.
    """
    markers = read_markers(directory)
    target = markers.get(app_id)
    if target is None:
        return False

    try:
        target.unlink()
        remaining = sorted(_marker_files(directory), key=_slot_order)
        for index, path in enumerate(remaining):
            slot = directory / f"{index}{MARKER_SUFFIX}"
            if path != slot:
                os.replace(path, slot)
    except OSError as exc:
        raise AppListError(
            ErrorCode.MARKER_WRITE_FAILED,
            f"Could not remove app {app_id} from {directory}: {exc}",
        ) from exc

    log.info("marker_removed", app_id=app_id, path=str(target), remaining=len(remaining))
    return True
