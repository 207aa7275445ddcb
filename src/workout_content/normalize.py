"""
Maps raw catalog records (plus optional enrichment) onto ``WorkoutContent``.
"""

from __future__ import annotations

import html
import re
from urllib.parse import urlencode, urlparse

from .config import SETTINGS
from .models import Enrichment, ExerciseRecord, MediaType, WorkoutContent

MAX_HTML_CHARS = 8000
MAX_LIST_ITEMS = 8
_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp")
_BODYWEIGHT = {"body weight", "bodyweight"}


def title_case(value: str) -> str:
    return " ".join(part[:1].upper() + part[1:].lower() for part in value.split())


def synthesize_description(record: ExerciseRecord) -> Enrichment:
    """Deterministic description built from whichever classification fields exist."""
    name = (record.name or "exercise").lower()
    segments = [f"Start in a stable position to perform the {name}."]
    if record.target:
        segments.append(f"Focus on engaging your {record.target.lower()}.")
    if record.body_part:
        segments.append(f"Keep the movement controlled to protect your {record.body_part.lower()}.")
    if record.equipment and record.equipment.lower() not in _BODYWEIGHT:
        segments.append(f"Use {record.equipment.lower()} as listed.")
    text = " ".join(segments)
    return Enrichment(description_html=f"<p>{html.escape(text)}</p>", description_text=text)


def media_proxy_url(record: ExerciseRecord, proxy_path: str | None = None) -> str | None:
    """Proxied media reference; the upstream host is only ever reached through the proxy."""
    path = proxy_path or SETTINGS.MEDIA_PROXY_PATH
    if record.gif_url:
        return f"{path}?{urlencode({'src': record.gif_url})}"
    if re.search(r"\d", record.id) and not record.id.startswith("fb-"):
        return f"{path}?{urlencode({'id': record.id})}"
    return None


def media_type_for(raw_url: str) -> MediaType:
    suffix = urlparse(raw_url).path.lower()
    if suffix.endswith(".mp4"):
        return "mp4"
    if suffix.endswith(_IMAGE_SUFFIXES):
        return "image"
    return "gif"


def _bounded(values: list[str]) -> list[str] | None:
    cleaned = [v.strip() for v in values if isinstance(v, str) and v.strip()]
    return cleaned[:MAX_LIST_ITEMS] or None


def normalize(
    record: ExerciseRecord,
    enrichment: Enrichment | None,
    *,
    source: str | None = None,
    proxy_path: str | None = None,
) -> WorkoutContent:
    """
    Build the caller-facing record. ``description`` is never empty: missing or
    blank enrichment falls back to the synthesized template.
    """
    enriched = enrichment is not None and bool(enrichment.description_text.strip())
    desc = enrichment if enriched else synthesize_description(record)
    if source is None:
        source = "exerciseDB+wger" if enriched else "exerciseDB"

    media_url = media_proxy_url(record, proxy_path)
    return WorkoutContent(
        id=record.id,
        title=title_case(record.name or "Exercise"),
        media_url=media_url,
        media_type=media_type_for(record.gif_url),
        preview_url=media_url,
        thumbnail_url=media_url,
        description=desc.description_text,
        instructions_html=desc.description_html[:MAX_HTML_CHARS] or None,
        body_part=record.body_part or None,
        target=record.target or None,
        equipment=record.equipment or None,
        source=source,
        primary_muscles=_bounded([record.target]),
        secondary_muscles=_bounded(record.secondary_muscles),
        equipment_list=_bounded([record.equipment]),
    )
