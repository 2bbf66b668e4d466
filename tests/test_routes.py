"""Tests for the page, health and SSE routes."""

import httpx
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from joke_server.main import create_app
from joke_server.routes import joke_stream


def _fail(request):
    raise httpx.ConnectError("upstream unreachable", request=request)


@pytest.fixture
def client(settings, joke_client):
    return TestClient(create_app(settings, joke_client))


def test_health(client, upstream):
    upstream.set("api.chucknorris.io/jokes/random", _fail)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.text == "Healthy"
    assert upstream.requests == []


def test_joke_page(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<title>Joke Server</title>" in response.text
    assert "<p>Chuck can divide by zero.</p>" in response.text


def test_joke_page_escapes_html(client, upstream):
    upstream.set(
        "api.chucknorris.io/jokes/random",
        lambda request: httpx.Response(200, json={"value": "<script>roundhouse()</script>"}),
    )

    response = client.get("/")

    assert "<script>" not in response.text
    assert "&lt;script&gt;roundhouse()&lt;/script&gt;" in response.text


def test_joke_page_upstream_failure(client, upstream):
    upstream.set("api.chucknorris.io/jokes/random", _fail)

    response = client.get("/")

    assert response.status_code == 500
    assert response.text == "Could not fetch joke."


class FakeRequest:
    def __init__(self):
        self.disconnected = False

    async def is_disconnected(self) -> bool:
        return self.disconnected


@pytest.mark.anyio
async def test_sse_stream_first_event_and_headers(settings, joke_client, upstream):
    response = await joke_stream(FakeRequest(), joke_client, settings)

    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert response.headers["connection"] == "keep-alive"

    first = await response.body_iterator.__anext__()
    await response.body_iterator.aclose()

    assert first == "data: Chuck can divide by zero.\n\n"
    assert len(upstream.requests) == 1


@pytest.mark.anyio
async def test_sse_stream_reports_fetch_errors(settings, joke_client, upstream):
    upstream.set("api.chucknorris.io/jokes/random", _fail)
    response = await joke_stream(FakeRequest(), joke_client, settings)

    first = await response.body_iterator.__anext__()
    await response.body_iterator.aclose()

    assert first == "data: Error fetching joke\n\n"


@pytest.mark.anyio
async def test_sse_disabled(settings, joke_client):
    settings.enable_sse = False

    with pytest.raises(HTTPException) as excinfo:
        await joke_stream(FakeRequest(), joke_client, settings)
    assert excinfo.value.status_code == 404
