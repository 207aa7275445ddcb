"""
Media resolution proxy for exercise demonstration clips.

Requests by catalog id walk an ordered chain of tiers (keyed provider, then
the legacy CDN) and stream the first success. Only bytes and a content type
leave this module; provider URLs and credentials stay inside.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from urllib.parse import urlsplit

import httpx

from ..config import SETTINGS
from ..exceptions import NotFoundError, UpstreamError, ValidationError
from ..exercisedb import ExerciseDBClient

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome Safari"
    ),
}
RESOLUTIONS = ("180", "360", "720", "1080")
DEFAULT_CONTENT_TYPE = "image/gif"
CACHE_HEADERS = {
    "Cache-Control": "public, max-age=86400, immutable",
    "Cross-Origin-Resource-Policy": "cross-origin",
}

_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")


@dataclass(frozen=True)
class MediaRequest:
    id: str | None = None
    src: str | None = None
    resolution: str = "360"


@dataclass
class MediaStream:
    """An open upstream response; iterate once, it closes itself."""

    content_type: str
    tier: str
    response: httpx.Response

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self.response.aiter_bytes():
                yield chunk
        finally:
            await self.response.aclose()

    async def aclose(self) -> None:
        await self.response.aclose()


Tier = Callable[[MediaRequest], Awaitable[MediaStream]]


def normalize_src(raw: str) -> str:
    """
    Absolute http(s) URL for a caller-supplied media source.

    Protocol-relative and bare-host values get ``https://``; any other scheme
    is a ``ValidationError``.
    """
    s = (raw or "").strip()
    if not s:
        raise ValidationError("bad-src")
    if s.startswith("//"):
        s = "https:" + s
    else:
        m = _SCHEME_RE.match(s)
        rest = s[m.end() :] if m else ""
        # "host:8080/x" is a bare host with a port, not a scheme
        if m and (rest.startswith("//") or not rest[:1].isdigit()):
            if m.group(1).lower() not in ("http", "https"):
                raise ValidationError("bad-src")
        else:
            s = "https://" + s

    parts = urlsplit(s)
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise ValidationError("bad-src")
    return s


def legacy_cdn_url(exercise_id: str, base_url: str | None = None) -> str | None:
    """Legacy GIF location: digits of the id, left-padded to four."""
    digits = re.sub(r"\D+", "", exercise_id)
    if not digits:
        return None
    base = (base_url or SETTINGS.LEGACY_MEDIA_CDN_URL).rstrip("/")
    return f"{base}/{digits.zfill(4)}.gif"


class MediaResolver:
    """Resolves media by catalog id or raw source URL."""

    def __init__(
        self,
        catalog: ExerciseDBClient,
        http: httpx.AsyncClient | None = None,
        *,
        legacy_enabled: bool | None = None,
        legacy_base_url: str | None = None,
    ) -> None:
        self.catalog = catalog
        self.http = http or catalog.http
        self.legacy_enabled = SETTINGS.FF_LEGACY_MEDIA if legacy_enabled is None else legacy_enabled
        self.legacy_base_url = legacy_base_url or SETTINGS.LEGACY_MEDIA_CDN_URL
        self.tiers: list[tuple[str, Tier]] = [
            ("provider", self._provider_tier),
            ("legacy-cdn", self._legacy_tier),
        ]

    async def _send(self, request: httpx.Request, tier: str) -> MediaStream:
        try:
            res = await self.http.send(request, stream=True, follow_redirects=True)
        except httpx.HTTPError as e:
            raise UpstreamError(f"{tier} media fetch failed", body=str(e)) from e

        if not res.is_success:
            try:
                body = (await res.aread()).decode("utf-8", "replace")[:500]
            finally:
                await res.aclose()
            raise UpstreamError(f"{tier} media fetch failed", status_code=res.status_code, body=body)

        content_type = res.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        return MediaStream(content_type=content_type, tier=tier, response=res)

    async def _provider_tier(self, req: MediaRequest) -> MediaStream:
        if not self.catalog.has_credentials:
            raise UpstreamError("provider tier not configured")
        request = self.catalog.build_image_request(req.id or "", req.resolution)
        request.headers["User-Agent"] = BROWSER_HEADERS["User-Agent"]
        return await self._send(request, "provider")

    async def _legacy_tier(self, req: MediaRequest) -> MediaStream:
        if not self.legacy_enabled:
            raise UpstreamError("legacy-cdn tier disabled")
        url = legacy_cdn_url(req.id or "", self.legacy_base_url)
        if url is None:
            raise UpstreamError("legacy-cdn needs a numeric id")
        return await self._send(self.http.build_request("GET", url, headers=BROWSER_HEADERS), "legacy-cdn")

    async def _resolve_id(self, req: MediaRequest) -> MediaStream:
        tried: list[str] = []
        for name, tier in self.tiers:
            tried.append(name)
            try:
                stream = await tier(req)
            except UpstreamError as e:
                logger.info("Media tier %s failed for id=%s: %s", name, req.id, e)
                continue
            logger.debug("Media id=%s served by %s", req.id, name)
            return stream
        raise NotFoundError("image-not-found", tried=tried, exercise_id=req.id)

    async def resolve(self, req: MediaRequest) -> MediaStream:
        """Validate, then resolve by id (tier chain) or by src (single fetch)."""
        if req.resolution not in RESOLUTIONS:
            raise ValidationError(f"res must be one of {', '.join(RESOLUTIONS)}")

        if req.id is not None and req.id.strip():
            exercise_id = req.id.strip()
            if not _ID_RE.match(exercise_id):
                raise ValidationError("bad-id")
            return await self._resolve_id(
                MediaRequest(id=exercise_id, resolution=req.resolution)
            )

        if req.src is not None and req.src.strip():
            url = normalize_src(req.src)
            request = self.http.build_request("GET", url, headers=BROWSER_HEADERS)
            return await self._send(request, "src")

        raise ValidationError("missing-id-or-src")
