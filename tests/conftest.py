"""
Shared test doubles: an httpx transport that records requests and answers
from a handler, plus helpers to build catalog/wger payloads.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

import httpx

CATALOG = "https://catalog.test"
WGER = "https://wger.test/api/v2"
CDN = "https://cdn.test"


class RecordingTransport(httpx.AsyncBaseTransport):
    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:  # type: ignore[override]
        self.requests.append(request)
        result = self.handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    def paths(self, host: str | None = None) -> list[str]:
        return [r.url.path for r in self.requests if host is None or r.url.host == host]


def make_exercise(i: int, **overrides: Any) -> dict[str, Any]:
    item = {
        "id": f"{i:04d}",
        "name": f"exercise {i}",
        "bodyPart": "cardio",
        "target": "cardiovascular system",
        "equipment": "body weight",
        "gifUrl": f"https://media.test/{i:04d}.gif",
    }
    item.update(overrides)
    return item


def wger_payload(description: str) -> dict[str, Any]:
    return {"results": [{"id": 1, "name": "x", "description": description}]}

