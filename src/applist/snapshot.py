"""Disk persistence for the metadata cache.

``SnapshotStore`` reads and writes the whole cache as one indented JSON array
of ``{"appid", "name", "image"}`` objects. Writes go to a sibling temp file
that is then renamed over the target, so a failed write leaves the previous
snapshot in place.

``SnapshotWriter`` runs those writes in the background for the cache. At most
one write is in flight; triggers that arrive while a write is pending collapse
into a single follow-up write of the then-current cache contents.
"""

from __future__ import annotations

import asyncio
import os
import threading
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import TypeAdapter, ValidationError

from applist.errors import AppListError, ErrorCode
from applist.models.catalog import AppRecord

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()

_SNAPSHOT_ADAPTER = TypeAdapter(list[AppRecord])
_RAW_SNAPSHOT_ADAPTER = TypeAdapter(list[Any])


class SnapshotStore:
    """JSON file holding the full cache snapshot."""

    def __init__(self, path: Path) -> None:
        self._path = path
        # to_thread callers may overlap; one reader/writer touches the file at a time
        self._file_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[AppRecord]:
        """Read the snapshot. A missing file is an empty snapshot."""
        with self._file_lock:
            try:
                raw = self._path.read_bytes()
            except FileNotFoundError:
                log.debug("snapshot_not_found", path=str(self._path))
                return []
            except OSError as exc:
                raise AppListError(
                    ErrorCode.SNAPSHOT_READ_FAILED,
                    f"Could not read cache snapshot {self._path}: {exc}",
                    recoverable=True,
                ) from exc

        try:
            items = _RAW_SNAPSHOT_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            raise AppListError(
                ErrorCode.SNAPSHOT_INVALID,
                f"Cache snapshot {self._path} is malformed",
            ) from exc

        records: list[AppRecord] = []
        for index, item in enumerate(items):
            try:
                records.append(AppRecord.model_validate(item))
            except ValidationError:
                log.warning("snapshot_item_skipped", path=str(self._path), index=index, item=item)
        return records

    def save(self, records: Iterable[AppRecord]) -> None:
        """Replace the snapshot with ``records``."""
        payload = _SNAPSHOT_ADAPTER.dump_json(list(records), indent=2, by_alias=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")

        with self._file_lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_bytes(payload)
                os.replace(tmp_path, self._path)
            except OSError as exc:
                raise AppListError(
                    ErrorCode.SNAPSHOT_WRITE_FAILED,
                    f"Could not write cache snapshot {self._path}: {exc}",
                    recoverable=True,
                ) from exc


class SnapshotWriter:
    """Coalescing background writer for a ``SnapshotStore``.

    ``source`` is awaited right before each write so the file always receives
    the newest cache contents, never a queued-up older copy.
    """

    def __init__(
        self,
        store: SnapshotStore,
        source: Callable[[], Awaitable[list[AppRecord]]],
    ) -> None:
        self._store = store
        self._source = source
        self._dirty = False
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self) -> None:
        """Schedule a write. Returns immediately; never raises."""
        self._dirty = True
        if not self.pending:
            self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while self._dirty:
            self._dirty = False
            records = await self._source()
            try:
                await asyncio.to_thread(self._store.save, records)
            except AppListError:
                log.warning(
                    "snapshot_save_failed", path=str(self._store.path), exc_info=True
                )
            else:
                log.debug("snapshot_saved", path=str(self._store.path), records=len(records))

    async def flush(self) -> None:
        """Wait until every requested write has finished."""
        while True:
            task = self._task
            if task is None or task.done():
                return
            await asyncio.shield(task)

    async def aclose(self) -> None:
        await self.flush()
        self._task = None
