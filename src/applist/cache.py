"""In-memory app metadata cache backed by a JSON snapshot on disk.

Lookup order for ``resolve``:
  1. Fresh in-memory entry -> returned without touching the network.
  2. Remote catalog lookup -> entry stored with ``now + ttl`` and a snapshot
     write is scheduled in the background.
  3. Lookup failed -> the old entry is returned even when expired. Only when
     no entry exists at all does the failure reach the caller.

The entry map is guarded by ``_lock``, which is held for map reads and writes
only, never across network or file I/O.

Concurrent ``resolve`` calls for the same id share one lookup task.

On first use the snapshot is loaded from disk. Loaded entries get a brand-new
``now + ttl`` expiry; the snapshot does not record when they were fetched.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from applist.errors import AppListError
from applist.models.cache import CacheEntry
from applist.snapshot import SnapshotWriter

if TYPE_CHECKING:
    from applist.catalog import CatalogClient
    from applist.models.catalog import AppRecord
    from applist.snapshot import SnapshotStore

log = structlog.get_logger()

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class MetadataCache:
    def __init__(
        self,
        store: SnapshotStore,
        catalog: CatalogClient,
        ttl_hours: int = 24,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._ttl = timedelta(hours=ttl_hours)
        self._clock = clock or _utcnow
        self._entries: dict[int, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._bootstrap_lock = asyncio.Lock()
        self._bootstrapped = False
        self._inflight: dict[int, asyncio.Task[AppRecord]] = {}
        self._writer = SnapshotWriter(store, self.snapshot)

    @property
    def writer(self) -> SnapshotWriter:
        return self._writer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, app_id: int) -> AppRecord:
        """Return metadata for ``app_id``.

        Raises ``AppListError`` only when the remote lookup fails and there
        is no cached entry, stale or fresh, to fall back on.
        """
        await self._ensure_bootstrapped()

        async with self._lock:
            entry = self._entries.get(app_id)
            if entry is not None and entry.is_fresh(self._clock()):
                log.debug("cache_hit", app_id=app_id)
                return entry.record

            task = self._inflight.get(app_id)
            if task is None:
                task = asyncio.create_task(self._refresh(app_id))
                self._inflight[app_id] = task
                task.add_done_callback(lambda _t: self._inflight.pop(app_id, None))

        return await asyncio.shield(task)

    async def snapshot(self) -> list[AppRecord]:
        """Copy of every cached record, fresh or stale."""
        async with self._lock:
            return [entry.record for entry in self._entries.values()]

    async def aclose(self) -> None:
        """Wait for pending snapshot writes to land on disk."""
        await self._writer.aclose()

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _refresh(self, app_id: int) -> AppRecord:
        try:
            record = await self._catalog.lookup(app_id)
        except AppListError as exc:
            async with self._lock:
                entry = self._entries.get(app_id)
            if entry is None:
                log.warning("lookup_failed", app_id=app_id, code=exc.code, error=exc.message)
                raise
            log.warning(
                "lookup_failed_serving_stale",
                app_id=app_id,
                code=exc.code,
                error=exc.message,
                expired_at=entry.expires_at.isoformat(),
            )
            return entry.record

        now = self._clock()
        async with self._lock:
            self._entries[app_id] = CacheEntry(
                record=record, fetched_at=now, expires_at=now + self._ttl
            )
        self._writer.request()
        return record

    async def _ensure_bootstrapped(self) -> None:
        if self._bootstrapped:
            return
        async with self._bootstrap_lock:
            if self._bootstrapped:
                return
            try:
                await self._load_snapshot()
            finally:
                self._bootstrapped = True

    async def _load_snapshot(self) -> None:
        try:
            records = await asyncio.to_thread(self._store.load)
        except AppListError:
            log.warning("snapshot_load_failed", path=str(self._store.path), exc_info=True)
            return

        now = self._clock()
        async with self._lock:
            for record in records:
                # never replace an entry that is already newer than the snapshot
                self._entries.setdefault(
                    record.app_id,
                    CacheEntry(record=record, fetched_at=now, expires_at=now + self._ttl),
                )
        log.info("cache_bootstrapped", entries=len(records), path=str(self._store.path))
