"""Unit-specific fixtures (no I/O beyond tmp_path)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from applist.cache import MetadataCache
from applist.snapshot import SnapshotStore

if TYPE_CHECKING:
    from pathlib import Path

    from tests.conftest import FakeCatalog, FakeClock


@pytest.fixture()
def store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "cache" / "cache.json")


@pytest.fixture()
async def cache(store: SnapshotStore, catalog: FakeCatalog, clock: FakeClock):
    """Metadata cache over a tmp snapshot and the fake catalog."""
    c = MetadataCache(store, catalog, ttl_hours=24, clock=clock)  # type: ignore[arg-type]
    yield c
    await c.aclose()
