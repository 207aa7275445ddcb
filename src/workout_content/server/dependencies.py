"""
FastAPI dependencies wiring the shared HTTP client, the enrichment cache and
the services. Tests swap any of these through ``app.dependency_overrides``.
"""

from __future__ import annotations

import httpx
from fastapi import Depends

from ..config import SETTINGS
from ..exercisedb import ExerciseDBClient
from ..services import MediaResolver, SearchService
from ..wger import EnrichmentCache, WgerClient

# Created once at process start, never torn down.
ENRICHMENT_CACHE = EnrichmentCache()

_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(timeout=SETTINGS.HTTP_TIMEOUT_SECONDS)
    return _http_client


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def get_enrichment_cache() -> EnrichmentCache:
    return ENRICHMENT_CACHE


def get_catalog(http: httpx.AsyncClient = Depends(get_http_client)) -> ExerciseDBClient:
    return ExerciseDBClient(http)


def get_wger_client(
    http: httpx.AsyncClient = Depends(get_http_client),
    cache: EnrichmentCache = Depends(get_enrichment_cache),
) -> WgerClient:
    return WgerClient(cache, http)


def get_search_service(
    catalog: ExerciseDBClient = Depends(get_catalog),
    wger: WgerClient = Depends(get_wger_client),
) -> SearchService:
    return SearchService(catalog, wger)


def get_media_resolver(catalog: ExerciseDBClient = Depends(get_catalog)) -> MediaResolver:
    return MediaResolver(catalog)
