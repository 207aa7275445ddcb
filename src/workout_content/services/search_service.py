"""
Search orchestration over ExerciseDB, wger and the fallback catalog.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Any

from ..config import SETTINGS
from ..exceptions import UpstreamError, ValidationError
from ..exercisedb import ExerciseDBClient
from ..fallback import (
    FALLBACK_WORKOUTS,
    fallback_matches,
    unique_body_parts,
    unique_equipment,
    unique_targets,
)
from ..models import (
    Enrichment,
    ExerciseRecord,
    FilterOptions,
    SearchFilters,
    SearchMeta,
    SearchResponse,
)
from ..normalize import normalize
from ..wger import WgerClient

logger = logging.getLogger(__name__)

MIN_LIMIT = 6
MAX_LIMIT = 24
DEFAULT_LIMIT = 12
# Extra records fetched to make up for ones dropped by the local equipment filter.
FETCH_MARGIN = 6
MAX_FILTER_CHARS = 80

LIVE_SOURCES = ["exerciseDB", "wger"]
FALLBACK_SOURCES = ["fallback"]


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(n):
        return None
    return math.floor(n)


def clamp_limit(value: Any) -> int:
    """Clamp to [6, 24]; missing or non-numeric values mean 12."""
    n = _to_int(value)
    if n is None:
        return DEFAULT_LIMIT
    return min(max(n, MIN_LIMIT), MAX_LIMIT)


def clamp_offset(value: Any) -> int:
    n = _to_int(value)
    if n is None:
        return 0
    return max(0, n)


def _clean_filter(name: str, value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if len(trimmed) > MAX_FILTER_CHARS:
        raise ValidationError(f"{name} must be at most {MAX_FILTER_CHARS} characters")
    if not trimmed.isprintable():
        raise ValidationError(f"{name} contains invalid characters")
    return trimmed


def build_filters(
    q: str | None = None,
    body_part: str | None = None,
    target: str | None = None,
    equipment: str | None = None,
) -> SearchFilters:
    """Trim filter values (blank means absent) and reject malformed ones."""
    return SearchFilters(
        q=_clean_filter("q", q),
        body_part=_clean_filter("bodyPart", body_part),
        target=_clean_filter("target", target),
        equipment=_clean_filter("equipment", equipment),
    )


class SearchService:
    """Drives the catalog, enrichment and normalizer for one search request."""

    def __init__(
        self,
        catalog: ExerciseDBClient,
        enricher: WgerClient,
        *,
        concurrency: int | None = None,
        proxy_path: str | None = None,
    ) -> None:
        self.catalog = catalog
        self.enricher = enricher
        self.concurrency = max(1, concurrency or SETTINGS.ENRICHMENT_CONCURRENCY)
        self.proxy_path = proxy_path

    async def _enrich(self, records: list[ExerciseRecord]) -> list[Enrichment | None]:
        """Bounded fan-out; results line up with ``records``."""
        sem = asyncio.Semaphore(self.concurrency)

        async def one(record: ExerciseRecord) -> Enrichment | None:
            async with sem:
                try:
                    return await self.enricher.fetch_description(record.name)
                except Exception as e:
                    logger.warning("Failed to fetch wger description for %r: %s", record.name, e)
                    return None

        return list(await asyncio.gather(*(one(r) for r in records)))

    async def search(
        self, filters: SearchFilters, limit: Any = None, offset: Any = None
    ) -> SearchResponse:
        """
        One page of workouts. Catalog failures propagate as ``UpstreamError``;
        use ``search_with_fallback`` for the degrade-to-fallback policy.
        """
        started = time.perf_counter()
        limit = clamp_limit(limit)
        offset = clamp_offset(offset)

        raw = await self.catalog.fetch_exercises(
            search=filters.q,
            target=filters.target,
            body_part=filters.body_part,
            limit=limit + FETCH_MARGIN,
            offset=offset,
        )

        if filters.equipment:
            wanted = filters.equipment.lower()
            raw = [r for r in raw if r.equipment.lower() == wanted]

        page = raw[:limit]
        enrichments = await self._enrich(page)
        items = [
            normalize(record, enrichment, proxy_path=self.proxy_path)
            for record, enrichment in zip(page, enrichments, strict=True)
        ]

        return SearchResponse(
            items=items,
            meta=SearchMeta(
                limit=limit,
                offset=offset,
                next_offset=offset + limit if len(page) == limit else None,
                filters=filters,
                sources=list(LIVE_SOURCES),
                took_ms=round((time.perf_counter() - started) * 1000),
            ),
        )

    def fallback_search(
        self, filters: SearchFilters, limit: Any = None, offset: Any = None
    ) -> SearchResponse:
        """Answer from the embedded catalog only; no network, no enrichment."""
        started = time.perf_counter()
        limit = clamp_limit(limit)
        offset = clamp_offset(offset)

        matches = fallback_matches(filters, len(FALLBACK_WORKOUTS))
        page = matches[offset : offset + limit]
        items = [
            normalize(record, None, source="fallback", proxy_path=self.proxy_path)
            for record in page
        ]
        return SearchResponse(
            items=items,
            meta=SearchMeta(
                limit=limit,
                offset=offset,
                next_offset=offset + limit if len(page) == limit else None,
                filters=filters,
                sources=list(FALLBACK_SOURCES),
                took_ms=round((time.perf_counter() - started) * 1000),
            ),
        )

    async def search_with_fallback(
        self, filters: SearchFilters, limit: Any = None, offset: Any = None
    ) -> SearchResponse:
        try:
            return await self.search(filters, limit, offset)
        except UpstreamError as e:
            logger.warning("Falling back to local workouts: %s", e)
            return self.fallback_search(filters, limit, offset)

    async def filter_options(self) -> FilterOptions:
        """Live option lists, substituting fallback values per failed field."""
        results = await asyncio.gather(
            self.catalog.list_body_parts(),
            self.catalog.list_equipment(),
            self.catalog.list_targets(),
            return_exceptions=True,
        )
        fields = (
            ("bodyParts", unique_body_parts),
            ("equipment", unique_equipment),
            ("targets", unique_targets),
        )
        resolved: list[list[str]] = []
        for (name, fallback), result in zip(fields, results, strict=True):
            if isinstance(result, Exception):
                logger.warning("Using fallback %s options: %s", name, result)
                result = fallback()
            elif isinstance(result, BaseException):
                raise result
            resolved.append(sorted(result, key=str.lower))

        body_parts, equipment, targets = resolved
        return FilterOptions(body_parts=body_parts, equipment=equipment, targets=targets)
