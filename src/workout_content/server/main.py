"""
Workout content FastAPI server main entrypoint.
Handles CORS, error mapping, health and the API routers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from urllib.parse import urlparse

import psutil
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import SETTINGS
from ..exceptions import NotFoundError, UpstreamError, ValidationError
from ..logging_setup import setup_logging
from .dependencies import close_http_client
from .routes.workouts import router as r_workouts


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(SETTINGS.LOG_LEVEL.upper())
    if not SETTINGS.EXERCISEDB_RAPIDAPI_KEY:
        logging.warning(
            "EXERCISEDB_RAPIDAPI_KEY is not set; catalog calls will fail and the "
            "provider media tier is skipped"
        )
    logging.info("Workout content API startup completed")

    yield

    # Shutdown
    try:
        await close_http_client()
        logging.info("Workout content API shutdown completed")
    except Exception as e:
        logging.exception("Shutdown failed: %s", e)


app = FastAPI(
    title="Workout Content API",
    description="Exercise search, enrichment and media proxy",
    version=__import__("workout_content").__version__,
    lifespan=lifespan,
)

# CORS setup: allow the calling webapp plus local development origins
allowed: set[str] = set()
try:
    u = urlparse(SETTINGS.WEBAPP_URL)
    if u.scheme and u.netloc:
        allowed.add(f"{u.scheme}://{u.netloc}")
except Exception:
    pass
allowed.add("http://localhost:3000")
allowed.add("http://127.0.0.1:3000")

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(allowed),
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_exc_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse({"ok": False, "error": "bad_request", "message": str(exc)}, status_code=400)


@app.exception_handler(NotFoundError)
async def not_found_exc_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logging.info("Media not found for id=%s after %s", exc.exercise_id, exc.tried)
    return JSONResponse(
        {"ok": False, "error": str(exc), "tried": exc.tried, "id": exc.exercise_id},
        status_code=404,
    )


@app.exception_handler(UpstreamError)
async def upstream_exc_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """
    Upstream failures are masked: status only, never the provider's body.
    """
    logging.warning("Upstream error in %s: %s", request.url.path, exc)
    return JSONResponse(
        {
            "ok": False,
            "error": "upstream_error",
            "message": "Upstream error",
            "status": exc.status_code,
        },
        status_code=502,
    )


@app.exception_handler(Exception)
async def global_exc_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler: log and return a generic error response.
    """
    logging.exception("Unhandled error in %s: %s", request.url.path, exc)
    return JSONResponse(
        {"ok": False, "error": "internal_error", "message": "Internal server error"},
        status_code=500,
    )


@app.get("/healthz")
async def healthz() -> dict:
    """
    Health check endpoint with system status.
    """
    try:
        memory = psutil.virtual_memory()
        cpu_percent = psutil.cpu_percent(interval=None)
        is_healthy = memory.percent < 90 and cpu_percent < 95
        return {
            "ok": is_healthy,
            "status": "healthy" if is_healthy else "degraded",
            "timestamp": datetime.now(UTC).isoformat(),
            "system": {
                "memory_percent": round(memory.percent, 1),
                "memory_available_mb": round(memory.available / 1024 / 1024, 1),
                "cpu_percent": round(cpu_percent, 1),
            },
            "catalog": {"keyed": bool(SETTINGS.EXERCISEDB_RAPIDAPI_KEY)},
        }
    except Exception as e:
        logging.exception("Health check failed: %s", e)
        return {
            "ok": False,
            "status": "error",
            "timestamp": datetime.now(UTC).isoformat(),
            "error": str(e),
        }


@app.get("/")
async def root() -> dict:
    """
    Root endpoint with API information.
    """
    return {
        "ok": True,
        "name": "Workout Content API",
        "version": app.version,
        "description": "Exercise search, enrichment and media proxy",
    }


app.include_router(r_workouts, prefix="/api/v1", tags=["workouts"])
