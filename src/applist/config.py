"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (APPLIST__CACHE__TTL_HOURS=12)
  2. applist.yaml           (searched in cwd, then the platform config dir)
  3. Hardcoded defaults

The settings file is optional — all fields have sensible defaults.

The user's selected Steam directory is not a setting: it lives in a small
JSON document (``config.json``) that is rewritten whenever the user picks a
different directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

import platformdirs
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

log = structlog.get_logger()

APP_NAME = "GreenLuma"

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir(APP_NAME)
_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir(APP_NAME)
_DEFAULT_SNAPSHOT_PATH = str(Path(_DEFAULT_CACHE_DIR) / "cache.json")
_DEFAULT_USER_CONFIG_PATH = str(Path(_DEFAULT_CONFIG_DIR) / "config.json")

_DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"


def _find_config_file() -> str | None:
    """Return the path of the first applist.yaml found, or None."""
    candidates = [
        Path("applist.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "applist.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CatalogSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    appdetails_url: str = "https://store.steampowered.com/api/appdetails"
    search_url: str = "https://store.steampowered.com/api/storesearch/"
    country: str = "us"
    language: str = "en"
    timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: str = _DEFAULT_USER_AGENT


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ttl_hours: int = Field(default=24, ge=0)
    snapshot_path: str = _DEFAULT_SNAPSHOT_PATH
    max_concurrency: int = Field(default=16, ge=1)


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: APPLIST__CACHE__TTL_HOURS=12
        env_prefix="APPLIST__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    catalog: CatalogSettings = CatalogSettings()
    cache: CacheSettings = CacheSettings()
    logging: LoggingSettings = LoggingSettings()
    user_config_path: str = _DEFAULT_USER_CONFIG_PATH

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )


# ---------------------------------------------------------------------------
# User config (selected Steam directory)
# ---------------------------------------------------------------------------


class UserConfig(BaseModel):
    steam_dir: str = ""


def load_user_config(path: Path) -> UserConfig:
    """Read the user config. Absent or malformed files yield the defaults."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        log.info("user_config_not_found", path=str(path))
        return UserConfig()
    except OSError:
        log.warning("user_config_read_error", path=str(path), exc_info=True)
        return UserConfig()

    try:
        return UserConfig.model_validate_json(raw)
    except ValidationError:
        log.warning("user_config_invalid", path=str(path), exc_info=True)
        return UserConfig()


def save_user_config(path: Path, config: UserConfig) -> None:
    """Overwrite the user config. Non-fatal on failure."""
    data = json.dumps(config.model_dump(), indent=2)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")
    except OSError:
        log.warning("user_config_write_error", path=str(path), exc_info=True)
