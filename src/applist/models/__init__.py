from __future__ import annotations

from applist.models.cache import CacheEntry
from applist.models.catalog import (
    UNKNOWN_TITLE,
    AppDetailsData,
    AppRecord,
    SearchItem,
    SearchResponse,
)

__all__ = [
    # catalog
    "AppRecord",
    "UNKNOWN_TITLE",
    "AppDetailsData",
    "SearchItem",
    "SearchResponse",
    # cache
    "CacheEntry",
]
