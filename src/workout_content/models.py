"""
Pydantic models shared by the catalog clients, the search service and the API.

Wire names are camelCase (``bodyPart``, ``gifUrl``, ``nextOffset``); Python
attributes are snake_case.
"""

from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MediaType = Literal["gif", "mp4", "image"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ExerciseRecord(CamelModel):
    """A raw exercise as returned by the primary catalog."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = ""
    body_part: str = ""
    target: str = ""
    equipment: str = ""
    gif_url: str = ""
    secondary_muscles: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return uuid.uuid4().hex
        return str(v).strip()

    @field_validator("name", "body_part", "target", "equipment", "gif_url", mode="before")
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("secondary_muscles", "instructions", mode="before")
    @classmethod
    def coerce_list(cls, v):
        if not isinstance(v, list):
            return []
        return [str(x) for x in v if x is not None]


class Enrichment(CamelModel):
    """Sanitized description from the enrichment source."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    description_html: str
    description_text: str


class WorkoutContent(CamelModel):
    """The unified record returned to callers."""

    id: str
    title: str
    media_url: str | None = None
    media_type: MediaType = "gif"
    preview_url: str | None = None
    thumbnail_url: str | None = None
    description: str = Field(min_length=1)
    instructions_html: str | None = None
    body_part: str | None = None
    target: str | None = None
    equipment: str | None = None
    source: str = "exerciseDB"
    primary_muscles: list[str] | None = None
    secondary_muscles: list[str] | None = None
    equipment_list: list[str] | None = None


class SearchFilters(CamelModel):
    q: str | None = None
    body_part: str | None = None
    target: str | None = None
    equipment: str | None = None


class SearchMeta(CamelModel):
    limit: int
    offset: int
    next_offset: int | None
    filters: SearchFilters
    sources: list[str]
    took_ms: int


class SearchResponse(CamelModel):
    items: list[WorkoutContent]
    meta: SearchMeta

    def to_payload(self) -> dict:
        data = self.model_dump(by_alias=True, mode="json")
        data["meta"]["filters"] = self.meta.filters.model_dump(
            by_alias=True, mode="json", exclude_none=True
        )
        return data


class FilterOptions(CamelModel):
    body_parts: list[str]
    equipment: list[str]
    targets: list[str]
