"""
ExerciseDB client for the primary exercise catalog (RapidAPI).

The upstream API has no usable server-side pagination for filtered lists, so
every lookup retrieves the full matching set and pages it in memory.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from .config import SETTINGS
from .exceptions import UpstreamError
from .models import ExerciseRecord

logger = logging.getLogger(__name__)

_BODY_LIMIT = 2000


class ExerciseDBClient:
    """Client for interacting with the ExerciseDB catalog."""

    def __init__(
        self,
        http: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        api_host: str | None = None,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=SETTINGS.HTTP_TIMEOUT_SECONDS)
        self.base_url = (base_url or SETTINGS.EXERCISEDB_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else SETTINGS.EXERCISEDB_RAPIDAPI_KEY
        self.api_host = api_host or SETTINGS.EXERCISEDB_RAPIDAPI_HOST

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http

    def _headers(self) -> dict[str, str]:
        headers = {"X-RapidAPI-Host": self.api_host, "Accept": "application/json"}
        if self.api_key:
            headers["X-RapidAPI-Key"] = self.api_key
        return headers

    async def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            res = await self._http.get(url, headers=self._headers())
        except httpx.TimeoutException as e:
            raise UpstreamError("ExerciseDB request timed out", body=str(e)) from e
        except httpx.HTTPError as e:
            raise UpstreamError("ExerciseDB unreachable", body=str(e)) from e

        if not res.is_success:
            raise UpstreamError(
                f"ExerciseDB request {path} failed",
                status_code=res.status_code,
                body=res.text[:_BODY_LIMIT],
            )
        try:
            return res.json()
        except ValueError as e:
            raise UpstreamError(
                "ExerciseDB returned invalid JSON",
                status_code=res.status_code,
                body=res.text[:_BODY_LIMIT],
            ) from e

    @staticmethod
    def _selector_path(search: str | None, target: str | None, body_part: str | None) -> str:
        """Pick one upstream endpoint: search > target > bodyPart > full list."""
        if search and search.strip():
            return f"/exercises/name/{quote(search.strip().lower(), safe='')}"
        if target and target.strip():
            return f"/exercises/target/{quote(target.strip().lower(), safe='')}"
        if body_part and body_part.strip():
            return f"/exercises/bodyPart/{quote(body_part.strip().lower(), safe='')}"
        return "/exercises"

    async def fetch_exercises(
        self,
        *,
        search: str | None = None,
        target: str | None = None,
        body_part: str | None = None,
        limit: int = 12,
        offset: int = 0,
    ) -> list[ExerciseRecord]:
        """
        Fetch raw exercise records for one selector and return ``[offset, offset+limit)``.

        Raises ``UpstreamError`` on any non-success; fallback is the caller's call.
        """
        path = self._selector_path(search, target, body_part)
        data = await self._get_json(path)
        if not isinstance(data, list):
            raise UpstreamError(
                "Unexpected ExerciseDB payload shape", status_code=502, body=str(data)[:_BODY_LIMIT]
            )

        start = max(0, offset)
        end = start + max(1, limit)
        page = [ExerciseRecord.model_validate(x) for x in data[start:end] if isinstance(x, dict)]
        logger.debug("ExerciseDB %s -> %d total, %d in page", path, len(data), len(page))
        return page

    async def _list_strings(self, path: str) -> list[str]:
        data = await self._get_json(path)
        if not isinstance(data, list):
            raise UpstreamError(
                "Unexpected ExerciseDB payload shape", status_code=502, body=str(data)[:_BODY_LIMIT]
            )
        values = {str(s).strip() for s in data if s is not None and str(s).strip()}
        return sorted(values, key=str.lower)

    async def list_body_parts(self) -> list[str]:
        """All body parts (e.g. "back", "chest", ...)."""
        return await self._list_strings("/exercises/bodyPartList")

    async def list_targets(self) -> list[str]:
        return await self._list_strings("/exercises/targetList")

    async def list_equipment(self) -> list[str]:
        return await self._list_strings("/exercises/equipmentList")

    def build_image_request(self, exercise_id: str, resolution: str = "360") -> httpx.Request:
        """Keyed provider image request; the key never leaves this process."""
        headers = self._headers()
        headers["Accept"] = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"
        return self._http.build_request(
            "GET",
            f"{self.base_url}/image",
            params={"exerciseId": exercise_id, "resolution": resolution},
            headers=headers,
        )

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()
