from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from applist.models.catalog import AppRecord


class CacheEntry(BaseModel):
    """In-memory cache slot for one app id."""

    model_config = ConfigDict(frozen=True)

    record: AppRecord
    fetched_at: datetime
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at
