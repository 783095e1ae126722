"""Integration test fixtures: isolated config, cache and Steam directories."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def app_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    """Point every applist path at tmp_path, for in-process and subprocess runs."""
    paths = {
        "user_config": tmp_path / "config" / "config.json",
        "snapshot": tmp_path / "cache" / "cache.json",
        "steam": tmp_path / "Steam",
    }
    paths["steam"].mkdir()
    (paths["steam"] / "steam.exe").write_bytes(b"")

    monkeypatch.setenv("APPLIST__USER_CONFIG_PATH", str(paths["user_config"]))
    monkeypatch.setenv("APPLIST__CACHE__SNAPSHOT_PATH", str(paths["snapshot"]))
    monkeypatch.chdir(tmp_path)  # keep any applist.yaml in the repo out of the way
    return paths


@pytest.fixture()
def subprocess_env(app_paths: dict[str, Path]) -> dict[str, str]:
    return os.environ.copy()
