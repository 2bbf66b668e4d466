"""
pytest configuration and fixtures.
"""

from typing import Callable, Dict, List

import httpx
import pytest

from joke_server.config import ServerSettings
from joke_server.joke_client import JokeClient


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(
        _env_file=None,
        port=3000,
        push_interval=0.05,
    )


class Upstream:
    """Canned upstream joke APIs that record every request they receive."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {
            "api.chucknorris.io/jokes/random": lambda request: httpx.Response(
                200, json={"value": "Chuck can divide by zero."}
            ),
            "api.chucknorris.io/jokes/categories": lambda request: httpx.Response(
                200, json=["animal", "career", "dev"]
            ),
            "icanhazdadjoke.com/": lambda request: httpx.Response(
                200, json={"id": "abc", "joke": "I'm afraid for the calendar.", "status": 200}
            ),
        }

    def set(self, key: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[key] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.host}{request.url.path}"
        if key not in self.routes:
            return httpx.Response(404, json={"message": f"no route for {key}"})
        return self.routes[key](request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def joke_client(settings: ServerSettings, upstream: Upstream) -> JokeClient:
    return JokeClient(settings, transport=upstream.transport())
