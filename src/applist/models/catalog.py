from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_TITLE = "Unknown"


class AppRecord(BaseModel):
    """Resolved catalog metadata for one Steam app.

    Serialized with the snapshot field names (``appid``, ``name``, ``image``).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    app_id: int = Field(alias="appid", gt=0)
    title: str = Field(alias="name")
    thumbnail_url: str = Field(default="", alias="image")

    @classmethod
    def unknown(cls, app_id: int) -> AppRecord:
        """Placeholder for an id the catalog does not know."""
        return cls(app_id=app_id, title=UNKNOWN_TITLE, thumbnail_url="")


# ---------------------------------------------------------------------------
# Wire formats
# ---------------------------------------------------------------------------


class AppDetailsData(BaseModel):
    name: str
    header_image: str = ""


class SearchItem(BaseModel):
    id: int
    name: str
    tiny_image: str = ""


class SearchResponse(BaseModel):
    items: list[SearchItem] = []
