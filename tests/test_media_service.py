"""
Tests for the media resolution proxy tier chain and src handling.
"""

import httpx
import pytest

from conftest import CATALOG, CDN, RecordingTransport
from workout_content.exceptions import NotFoundError, UpstreamError, ValidationError
from workout_content.exercisedb import ExerciseDBClient
from workout_content.services.media_service import (
    MediaRequest,
    MediaResolver,
    legacy_cdn_url,
    normalize_src,
)

GIF = b"GIF89a-fake"


def _resolver(handler, *, api_key="", legacy_enabled=True):
    transport = RecordingTransport(handler)
    http = httpx.AsyncClient(transport=transport)
    catalog = ExerciseDBClient(http, base_url=CATALOG, api_key=api_key)
    resolver = MediaResolver(catalog, legacy_enabled=legacy_enabled, legacy_base_url=CDN)
    return resolver, transport


async def _read(stream) -> bytes:
    return b"".join([chunk async for chunk in stream.iter_bytes()])


@pytest.mark.asyncio
async def test_provider_disabled_falls_through_to_legacy_tier():
    resolver, transport = _resolver(
        lambda r: httpx.Response(200, content=GIF, headers={"content-type": "image/gif"})
    )

    stream = await resolver.resolve(MediaRequest(id="37"))

    assert stream.tier == "legacy-cdn"
    assert stream.content_type == "image/gif"
    assert await _read(stream) == GIF
    assert [str(r.url) for r in transport.requests] == [f"{CDN}/0037.gif"]


@pytest.mark.asyncio
async def test_provider_success_returns_immediately():
    resolver, transport = _resolver(
        lambda r: httpx.Response(200, content=GIF, headers={"content-type": "image/webp"}),
        api_key="secret",
    )

    stream = await resolver.resolve(MediaRequest(id="0037", resolution="180"))

    assert stream.tier == "provider"
    assert stream.content_type == "image/webp"
    assert await _read(stream) == GIF
    assert len(transport.requests) == 1
    sent = transport.requests[0]
    assert sent.url.path == "/image"
    assert sent.url.params["exerciseId"] == "0037"
    assert sent.url.params["resolution"] == "180"
    assert sent.headers["X-RapidAPI-Key"] == "secret"


@pytest.mark.asyncio
async def test_provider_failure_then_legacy_success():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "catalog.test":
            return httpx.Response(429, text="quota")
        return httpx.Response(200, content=GIF)

    resolver, transport = _resolver(handler, api_key="secret")

    stream = await resolver.resolve(MediaRequest(id="ex-37"))

    assert stream.tier == "legacy-cdn"
    assert stream.content_type == "image/gif"
    assert [r.url.host for r in transport.requests] == ["catalog.test", "cdn.test"]


@pytest.mark.asyncio
async def test_all_tiers_failing_names_both_tiers():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "catalog.test":
            raise httpx.ConnectTimeout("slow", request=request)
        return httpx.Response(404, text="missing")

    resolver, _ = _resolver(handler, api_key="secret")

    with pytest.raises(NotFoundError) as info:
        await resolver.resolve(MediaRequest(id="37"))

    assert info.value.tried == ["provider", "legacy-cdn"]
    assert info.value.exercise_id == "37"


@pytest.mark.asyncio
async def test_disabled_tiers_are_reported_without_network():
    resolver, transport = _resolver(lambda r: httpx.Response(200), legacy_enabled=False)

    with pytest.raises(NotFoundError) as info:
        await resolver.resolve(MediaRequest(id="37"))

    assert info.value.tried == ["provider", "legacy-cdn"]
    assert transport.requests == []


@pytest.mark.asyncio
async def test_src_is_fetched_with_browser_headers():
    resolver, transport = _resolver(lambda r: httpx.Response(200, content=GIF))

    stream = await resolver.resolve(MediaRequest(src="//media.test/a.gif"))

    assert await _read(stream) == GIF
    sent = transport.requests[0]
    assert str(sent.url) == "https://media.test/a.gif"
    assert sent.headers["User-Agent"].startswith("Mozilla/5.0")
    assert sent.headers["Accept"].startswith("image/")
    assert "X-RapidAPI-Key" not in sent.headers


@pytest.mark.asyncio
async def test_src_upstream_failure_raises():
    resolver, _ = _resolver(lambda r: httpx.Response(403, text="forbidden"))

    with pytest.raises(UpstreamError) as info:
        await resolver.resolve(MediaRequest(src="https://media.test/a.gif"))

    assert info.value.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "req",
    [
        MediaRequest(),
        MediaRequest(src="javascript:alert(1)"),
        MediaRequest(src="ftp://media.test/a.gif"),
        MediaRequest(id="../etc/passwd"),
        MediaRequest(id="37", resolution="999"),
    ],
)
async def test_bad_input_is_rejected_before_any_network_call(req):
    resolver, transport = _resolver(lambda r: httpx.Response(200))

    with pytest.raises(ValidationError):
        await resolver.resolve(req)

    assert transport.requests == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://a.test/x.gif", "https://a.test/x.gif"),
        ("http://a.test/x.gif", "http://a.test/x.gif"),
        ("//a.test/x.gif", "https://a.test/x.gif"),
        ("a.test/x.gif", "https://a.test/x.gif"),
        ("localhost:8080/x.gif", "https://localhost:8080/x.gif"),
    ],
)
def test_normalize_src(raw, expected):
    assert normalize_src(raw) == expected


def test_legacy_cdn_url_pads_numeric_portion():
    assert legacy_cdn_url("37", CDN) == f"{CDN}/0037.gif"
    assert legacy_cdn_url("ex-1234", CDN) == f"{CDN}/1234.gif"
    assert legacy_cdn_url("fb-pushup", CDN) is None
