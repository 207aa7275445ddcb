"""
Tests for the ExerciseDB catalog client.
"""

import httpx
import pytest

from conftest import CATALOG, RecordingTransport, make_exercise
from workout_content.exceptions import UpstreamError
from workout_content.exercisedb import ExerciseDBClient


def _client(transport: RecordingTransport, api_key: str = "test-key") -> ExerciseDBClient:
    return ExerciseDBClient(
        httpx.AsyncClient(transport=transport), base_url=CATALOG, api_key=api_key, api_host="h.test"
    )


@pytest.mark.asyncio
async def test_selector_priority_search_over_target_over_body_part():
    transport = RecordingTransport(lambda r: httpx.Response(200, json=[]))
    client = _client(transport)

    await client.fetch_exercises(search="Push Up", target="pectorals", body_part="chest")
    await client.fetch_exercises(target="pectorals", body_part="chest")
    await client.fetch_exercises(body_part="upper legs")
    await client.fetch_exercises()

    assert transport.paths() == [
        "/exercises/name/push up",
        "/exercises/target/pectorals",
        "/exercises/bodyPart/upper legs",
        "/exercises",
    ]
    headers = transport.requests[0].headers
    assert headers["X-RapidAPI-Key"] == "test-key"
    assert headers["X-RapidAPI-Host"] == "h.test"


@pytest.mark.asyncio
async def test_pages_in_memory():
    data = [make_exercise(i) for i in range(30)]
    client = _client(RecordingTransport(lambda r: httpx.Response(200, json=data)))

    page = await client.fetch_exercises(limit=5, offset=10)

    assert [r.id for r in page] == ["0010", "0011", "0012", "0013", "0014"]
    assert page[0].body_part == "cardio"
    assert page[0].gif_url == "https://media.test/0010.gif"


@pytest.mark.asyncio
async def test_non_success_raises_upstream_error_with_status_and_body():
    client = _client(RecordingTransport(lambda r: httpx.Response(429, text="Too many requests")))

    with pytest.raises(UpstreamError) as info:
        await client.fetch_exercises(body_part="back")

    assert info.value.status_code == 429
    assert info.value.body == "Too many requests"


@pytest.mark.asyncio
async def test_network_error_and_bad_shape_raise_upstream_error():
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(UpstreamError):
        await _client(RecordingTransport(unreachable)).fetch_exercises()

    bad_shape = RecordingTransport(lambda r: httpx.Response(200, json={"message": "nope"}))
    with pytest.raises(UpstreamError) as info:
        await _client(bad_shape).fetch_exercises()
    assert info.value.status_code == 502


@pytest.mark.asyncio
async def test_option_lists_are_trimmed_deduplicated_and_sorted():
    transport = RecordingTransport(
        lambda r: httpx.Response(200, json=["waist", " back", "back ", "", "chest"])
    )
    client = _client(transport)

    assert await client.list_body_parts() == ["back", "chest", "waist"]
    await client.list_targets()
    await client.list_equipment()
    assert transport.paths() == [
        "/exercises/bodyPartList",
        "/exercises/targetList",
        "/exercises/equipmentList",
    ]


def test_image_request_carries_credentials_and_resolution():
    client = _client(RecordingTransport(lambda r: httpx.Response(200)))

    request = client.build_image_request("0037", "720")

    assert request.url.path == "/image"
    assert request.url.params["exerciseId"] == "0037"
    assert request.url.params["resolution"] == "720"
    assert request.headers["X-RapidAPI-Key"] == "test-key"
    assert client.has_credentials
    assert not _client(RecordingTransport(lambda r: httpx.Response(200)), api_key="").has_credentials
