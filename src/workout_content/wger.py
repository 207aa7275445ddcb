"""
wger client used to enrich catalog exercises with written instructions.

Lookups are best-effort: any upstream failure yields ``None`` and the caller
synthesizes a description instead.
"""

from __future__ import annotations

import logging
import threading

import httpx

from .config import SETTINGS
from .models import Enrichment
from .sanitize import clean_html, html_to_text

logger = logging.getLogger(__name__)


class EnrichmentCache:
    """
    Process-lifetime, write-once store of descriptions keyed by lower-cased name.

    Create one per process and hand it to every ``WgerClient``. Entries are
    never updated or evicted.
    """

    def __init__(self) -> None:
        self._data: dict[str, Enrichment] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(name: str) -> str:
        return name.strip().lower()

    def get(self, name: str) -> Enrichment | None:
        return self._data.get(self.key(name))

    def put(self, name: str, value: Enrichment) -> Enrichment:
        """Insert unless present; returns whichever entry won."""
        with self._lock:
            return self._data.setdefault(self.key(name), value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.key(name) in self._data

    def __len__(self) -> int:
        return len(self._data)


class WgerClient:
    """Looks up free-text exercise descriptions on wger."""

    def __init__(
        self,
        cache: EnrichmentCache,
        http: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        language_id: int | None = None,
        search_limit: int | None = None,
    ) -> None:
        self.cache = cache
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=SETTINGS.HTTP_TIMEOUT_SECONDS)
        self.base_url = (base_url or SETTINGS.WGER_BASE_URL).rstrip("/")
        self.language_id = language_id or SETTINGS.WGER_LANGUAGE_ID
        self.search_limit = search_limit or SETTINGS.WGER_SEARCH_LIMIT

    async def fetch_description(self, name: str) -> Enrichment | None:
        """Return the sanitized description for ``name`` or ``None`` if there is none."""
        if not name or not name.strip():
            return None

        cached = self.cache.get(name)
        if cached is not None:
            return cached

        params = {
            "language": str(self.language_id),
            "search": name.strip(),
            "limit": str(self.search_limit),
        }
        try:
            res = await self._http.get(
                f"{self.base_url}/exercise/", params=params, headers={"Accept": "application/json"}
            )
            if not res.is_success:
                logger.warning("wger lookup for %r returned %s", name, res.status_code)
                return None
            data = res.json()
        except httpx.TimeoutException:
            logger.warning("wger lookup for %r timed out", name)
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("wger lookup for %r failed: %s", name, e)
            return None

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            return None

        for item in results:
            if not isinstance(item, dict):
                continue
            raw = item.get("description")
            if not isinstance(raw, str) or not raw.strip():
                continue
            safe_html = clean_html(raw)
            text = html_to_text(safe_html)
            if not text:
                continue
            return self.cache.put(name, Enrichment(description_html=safe_html, description_text=text))

        logger.debug("wger has no usable description for %r", name)
        return None

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()
