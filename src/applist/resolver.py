"""Concurrent resolution of a set of app ids through the metadata cache."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from applist.errors import AppListError

if TYPE_CHECKING:
    from applist.cache import MetadataCache
    from applist.models.catalog import AppRecord

log = structlog.get_logger()


class BatchResolver:
    """Fan out ``MetadataCache.resolve`` over many ids.

    At most ``max_concurrency`` resolutions run at once. An id whose
    resolution fails is left out of the result; the other ids are unaffected.
    Result order is unspecified.
    """

    def __init__(self, cache: MetadataCache, max_concurrency: int = 16) -> None:
        self._cache = cache
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def resolve_all(self, app_ids: Iterable[int]) -> list[AppRecord]:
        unique_ids = set(app_ids)
        results: list[AppRecord] = []
        # Separate from the cache lock so appends never wait on cache traffic
        results_lock = asyncio.Lock()

        async def worker(app_id: int) -> None:
            async with self._semaphore:
                try:
                    record = await self._cache.resolve(app_id)
                except AppListError as exc:
                    log.warning("resolve_dropped", app_id=app_id, code=exc.code)
                    return
            async with results_lock:
                results.append(record)

        await asyncio.gather(*(worker(app_id) for app_id in unique_ids))

        log.info("batch_resolved", requested=len(unique_ids), resolved=len(results))
        return results
