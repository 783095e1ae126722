"""Application state shared by the library operations."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from applist.cache import MetadataCache
from applist.catalog import CatalogClient, build_http_client
from applist.config import UserConfig, load_user_config
from applist.resolver import BatchResolver
from applist.snapshot import SnapshotStore

if TYPE_CHECKING:
    import httpx

    from applist.config import Settings


@dataclass
class AppState:
    """Everything one session needs. Built once by ``open_state``."""

    settings: Settings
    user_config: UserConfig
    http_client: httpx.AsyncClient
    catalog: CatalogClient
    cache: MetadataCache
    resolver: BatchResolver

    @property
    def user_config_path(self) -> Path:
        return Path(self.settings.user_config_path).expanduser()


@asynccontextmanager
async def open_state(settings: Settings) -> AsyncIterator[AppState]:
    """Wire up the session; on exit flush snapshot writes and close HTTP."""
    user_config = load_user_config(Path(settings.user_config_path).expanduser())
    store = SnapshotStore(Path(settings.cache.snapshot_path).expanduser())

    async with build_http_client(settings.catalog) as client:
        catalog = CatalogClient(client, settings.catalog)
        cache = MetadataCache(store, catalog, ttl_hours=settings.cache.ttl_hours)
        resolver = BatchResolver(cache, max_concurrency=settings.cache.max_concurrency)
        state = AppState(
            settings=settings,
            user_config=user_config,
            http_client=client,
            catalog=catalog,
            cache=cache,
            resolver=resolver,
        )
        try:
            yield state
        finally:
            await cache.aclose()
