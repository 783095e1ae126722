"""Steam store catalog client: per-app details lookup and free-text search.

Only transport failures, timeouts and malformed bodies are errors. An app the
store does not know (missing key or ``success: false``) resolves to the
``Unknown`` placeholder record.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from applist.config import CatalogSettings
from applist.errors import AppListError, ErrorCode
from applist.models.catalog import AppDetailsData, AppRecord, SearchResponse

log = structlog.get_logger()


def build_http_client(settings: CatalogSettings | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client used for all catalog requests."""
    settings = settings or CatalogSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )


def parse_app_details(app_id: int, payload: Any) -> AppRecord:
    """Turn an ``appdetails`` response body into a record for ``app_id``."""
    if not isinstance(payload, dict):
        raise AppListError(
            ErrorCode.LOOKUP_PARSE_FAILED,
            f"Unexpected appdetails response for app {app_id}: expected an object",
        )

    entry = payload.get(str(app_id))
    if not isinstance(entry, dict) or entry.get("success") is not True:
        return AppRecord.unknown(app_id)

    try:
        data = AppDetailsData.model_validate(entry.get("data"))
    except ValidationError as exc:
        raise AppListError(
            ErrorCode.LOOKUP_PARSE_FAILED,
            f"Malformed appdetails data for app {app_id}",
        ) from exc

    return AppRecord(app_id=app_id, title=data.name, thumbnail_url=data.header_image)


class CatalogClient:
    def __init__(self, client: httpx.AsyncClient, settings: CatalogSettings | None = None) -> None:
        self._client = client
        self._settings = settings or CatalogSettings()

    async def lookup(self, app_id: int) -> AppRecord:
        """Fetch title and header image for a single app id."""
        params = {
            "appids": str(app_id),
            "cc": self._settings.country,
            "l": self._settings.language,
        }
        try:
            response = await self._client.get(
                self._settings.appdetails_url,
                params=params,
                timeout=self._settings.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise AppListError(
                ErrorCode.LOOKUP_TIMEOUT,
                f"Lookup for app {app_id} timed out after {self._settings.timeout_seconds}s",
                recoverable=True,
            ) from exc
        except httpx.HTTPError as exc:
            raise AppListError(
                ErrorCode.LOOKUP_FAILED,
                f"Lookup for app {app_id} failed: {exc}",
                recoverable=True,
            ) from exc

        if response.status_code != 200:
            raise AppListError(
                ErrorCode.LOOKUP_FAILED,
                f"Lookup for app {app_id} returned HTTP {response.status_code}",
                recoverable=True,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AppListError(
                ErrorCode.LOOKUP_PARSE_FAILED,
                f"Lookup for app {app_id} returned a non-JSON body",
            ) from exc

        record = parse_app_details(app_id, payload)
        log.debug("catalog_lookup", app_id=app_id, title=record.title)
        return record

    async def search(self, term: str) -> list[AppRecord]:
        """Search the store by name. A blank term returns no results."""
        term = term.strip()
        if not term:
            return []

        params = {"term": term, "cc": self._settings.country, "l": self._settings.language}
        try:
            response = await self._client.get(
                self._settings.search_url,
                params=params,
                timeout=self._settings.timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise AppListError(
                ErrorCode.SEARCH_FAILED, f"Store search failed: {exc}", recoverable=True
            ) from exc

        if response.status_code != 200:
            raise AppListError(
                ErrorCode.SEARCH_FAILED,
                f"Store search returned HTTP {response.status_code}: {response.text[:2048]}",
                recoverable=True,
            )

        try:
            result = SearchResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise AppListError(ErrorCode.SEARCH_FAILED, "Malformed store search response") from exc

        return [
            AppRecord(app_id=item.id, title=item.name, thumbnail_url=item.tiny_image)
            for item in result.items
            if item.id > 0
        ]
