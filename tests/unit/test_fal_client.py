"""Unit tests for the fal.ai queue transport."""

import json

import httpx
import pytest
from services.fal_client import FalClientError, FalQueueClient

QUEUE_URL = "https://queue.fal.test"


def _make_client(handler, **kwargs) -> FalQueueClient:
    client = FalQueueClient(
        queue_url=QUEUE_URL,
        poll_interval=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )
    client.configure("test_fal_key")
    return client


@pytest.mark.unit
@pytest.mark.asyncio
async def test_subscribe_submits_polls_and_fetches():
    """A job should be submitted, polled until COMPLETED, then fetched."""
    seen: list[tuple[str, str]] = []
    statuses = iter(["IN_QUEUE", "IN_PROGRESS", "COMPLETED"])

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        assert request.headers["Authorization"] == "Key test_fal_key"

        if request.method == "POST":
            assert json.loads(request.content) == {"prompt": "fox", "num_images": 1}
            return httpx.Response(
                200,
                json={
                    "request_id": "req-1",
                    "status_url": f"{QUEUE_URL}/fal-ai/flux/requests/req-1/status",
                    "response_url": f"{QUEUE_URL}/fal-ai/flux/requests/req-1",
                },
            )
        if request.url.path.endswith("/status"):
            return httpx.Response(200, json={"status": next(statuses)})
        return httpx.Response(200, json={"images": [{"url": "https://fal.media/fox.png"}]})

    client = _make_client(handler)
    try:
        payload = await client.subscribe("fal-ai/flux/dev", {"prompt": "fox", "num_images": 1})
    finally:
        await client.close()

    assert payload == {"images": [{"url": "https://fal.media/fox.png"}]}
    assert seen[0] == ("POST", f"{QUEUE_URL}/fal-ai/flux/dev")
    assert [method for method, _ in seen] == ["POST", "GET", "GET", "GET", "GET"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_submit_builds_missing_urls():
    """Status and response URLs fall back to the request-id based paths."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"request_id": "abc"})

    client = _make_client(handler)
    try:
        receipt = await client.submit("fal-ai/nano-banana/edit", {})
    finally:
        await client.close()

    assert receipt["status_url"] == f"{QUEUE_URL}/fal-ai/nano-banana/edit/requests/abc/status"
    assert receipt["response_url"] == f"{QUEUE_URL}/fal-ai/nano-banana/edit/requests/abc"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unauthorized_raises_http_status_error():
    """A 401 on submit should surface with its status code intact."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"detail": "Invalid key"})

    client = _make_client(handler)
    try:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await client.subscribe("fal-ai/flux/dev", {})
    finally:
        await client.close()

    assert exc_info.value.response.status_code == 401


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_request_id_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    client = _make_client(handler)
    try:
        with pytest.raises(FalClientError, match="request id"):
            await client.submit("fal-ai/flux/dev", {})
    finally:
        await client.close()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_completed_with_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, json={"request_id": "r"})
        return httpx.Response(200, json={"status": "COMPLETED", "error": "CUDA out of memory"})

    client = _make_client(handler)
    try:
        with pytest.raises(FalClientError, match="CUDA out of memory"):
            await client.subscribe("fal-ai/flux/dev", {})
    finally:
        await client.close()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_poll_attempts_are_bounded():
    polls = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, json={"request_id": "r"})
        polls.append(request.url)
        return httpx.Response(200, json={"status": "IN_QUEUE", "queue_position": 3})

    client = _make_client(handler, max_poll_attempts=3)
    try:
        with pytest.raises(FalClientError, match="did not complete"):
            await client.subscribe("fal-ai/flux/dev", {})
    finally:
        await client.close()

    assert len(polls) == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_status_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, json={"request_id": "r"})
        return httpx.Response(200, json={"status": "CANCELLED"})

    client = _make_client(handler)
    try:
        with pytest.raises(FalClientError, match="CANCELLED"):
            await client.subscribe("fal-ai/flux/dev", {})
    finally:
        await client.close()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unconfigured_client_has_no_auth_header():
    client = FalQueueClient(queue_url=QUEUE_URL)
    try:
        assert not client.is_configured
        client.configure("k")
        assert client.is_configured
    finally:
        await client.close()
