"""
Workout search, filter options and media proxy routes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, StreamingResponse

from ...exercisedb import ExerciseDBClient
from ...normalize import media_proxy_url
from ...services import MediaRequest, MediaResolver, SearchService
from ...services.media_service import CACHE_HEADERS
from ...services.search_service import build_filters
from ..dependencies import get_catalog, get_media_resolver, get_search_service

router = APIRouter()

SEARCH_CACHE_CONTROL = "private, max-age=120"


@router.get("/workouts/search")
async def workouts_search(
    q: str | None = Query(None, description="Free-text exercise name"),
    body_part: str | None = Query(None, alias="bodyPart"),
    target: str | None = Query(None, description="Target muscle"),
    equipment: str | None = Query(None, description="Applied locally after the catalog fetch"),
    limit: str | None = Query(None, description="Page size, clamped to 6..24 (default 12)"),
    offset: str | None = Query(None, description="Pagination offset, >= 0"),
    service: SearchService = Depends(get_search_service),
) -> JSONResponse:
    """
    Search workouts with enrichment. A catalog outage is answered from the
    embedded fallback catalog instead of an error.
    """
    filters = build_filters(q, body_part, target, equipment)
    result = await service.search_with_fallback(filters, limit, offset)
    return JSONResponse(result.to_payload(), headers={"Cache-Control": SEARCH_CACHE_CONTROL})


@router.get("/workouts/filters")
async def workouts_filters(service: SearchService = Depends(get_search_service)) -> dict:
    """
    Filter options for the UI. Each field falls back independently.
    """
    options = await service.filter_options()
    return options.model_dump(by_alias=True)


@router.get("/workouts/media")
async def workouts_media(
    id: str | None = Query(None, description="Catalog exercise id"),
    exercise_id: str | None = Query(None, alias="exerciseId"),
    src: str | None = Query(None, description="Raw media URL"),
    res: str = Query("360", description="Provider resolution: 180, 360, 720 or 1080"),
    resolver: MediaResolver = Depends(get_media_resolver),
) -> StreamingResponse:
    """
    Stream demonstration media. Only bytes and the content type are passed on.
    """
    stream = await resolver.resolve(
        MediaRequest(id=id or exercise_id, src=src, resolution=res.strip())
    )
    return StreamingResponse(
        stream.iter_bytes(), media_type=stream.content_type, headers=dict(CACHE_HEADERS)
    )


@router.get("/workouts")
async def workouts_list(
    q: str | None = Query(None),
    body_part: str | None = Query(None, alias="bodyPart"),
    limit: int = Query(12, ge=1, le=40),
    catalog: ExerciseDBClient = Depends(get_catalog),
) -> list[dict[str, Any]]:
    """
    Raw catalog listing without enrichment, for simple pickers.
    """
    records = await catalog.fetch_exercises(search=q, body_part=body_part, limit=limit)
    return [
        {
            "id": r.id,
            "name": r.name or "Unknown exercise",
            "bodyPart": r.body_part or "full body",
            "target": r.target or "compound",
            "equipment": r.equipment or "body weight",
            "gifUrl": media_proxy_url(r) or "",
        }
        for r in records
    ]
