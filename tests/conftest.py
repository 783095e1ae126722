"""Shared fixtures: a controllable clock and an in-memory catalog."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
import structlog

from applist.errors import AppListError, ErrorCode
from applist.models.catalog import AppRecord

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeCatalog:
    """Stands in for CatalogClient. Every id resolves to "App <id>" unless told otherwise."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls: list[int] = []
        self.records: dict[int, AppRecord] = {}
        self.failures: set[int] = set()
        self.active = 0
        self.max_active = 0

    async def lookup(self, app_id: int) -> AppRecord:
        self.calls.append(app_id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if app_id in self.failures:
                raise AppListError(
                    ErrorCode.LOOKUP_TIMEOUT, f"Lookup for app {app_id} timed out", recoverable=True
                )
            return self.records.get(app_id) or AppRecord(app_id=app_id, title=f"App {app_id}")
        finally:
            self.active -= 1

    async def search(self, term: str) -> list[AppRecord]:
        return [r for r in self.records.values() if term.lower() in r.title.lower()]


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests configure structlog against captured streams; undo that."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture()
def sample_records() -> list[AppRecord]:
    return [
        AppRecord(app_id=10, title="Counter-Strike", thumbnail_url="https://cdn.example/10.jpg"),
        AppRecord(app_id=220, title="Half-Life 2", thumbnail_url="https://cdn.example/220.jpg"),
        AppRecord(app_id=400, title="Portal", thumbnail_url=""),
    ]
