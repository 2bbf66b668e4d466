import logging
from typing import Any, Dict, List, Literal, Optional

import httpx

from .config import ServerSettings

logger = logging.getLogger(__name__)

JokeKind = Literal["random", "by-category", "categories", "dad-joke"]


class JokeFetchError(Exception):
    """Raised when an upstream joke API can't be reached or returns an unusable body."""


def _upstream_message(data: Any) -> Optional[str]:
    # chucknorris.io error bodies look like {"status": 404, "error": ..., "message": ...}
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    return None


def _extract_field(data: Any, field: str) -> str:
    if isinstance(data, dict) and isinstance(data.get(field), str):
        return data[field]
    detail = _upstream_message(data) or f"response has no '{field}' field"
    raise JokeFetchError(f"Unexpected upstream response: {detail}")


def _join_categories(data: Any) -> str:
    if not isinstance(data, list):
        detail = _upstream_message(data) or "expected a list of categories"
        raise JokeFetchError(f"Unexpected upstream response: {detail}")
    categories: List[str] = [str(name) for name in data]
    return ", ".join(categories)


class JokeClient:
    """Fetches jokes from the Chuck Norris and dad-joke APIs.

    Every call opens its own ``httpx.AsyncClient``; nothing is shared between
    requests. Pass ``transport`` to route requests somewhere other than the
    network (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: ServerSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport

    async def _get_json(
        self,
        base_url: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=base_url,
            timeout=self.settings.request_timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(endpoint, params=params, headers=headers)
            except httpx.HTTPError as e:
                raise JokeFetchError(f"Request to {base_url} failed: {e}") from e
            try:
                return response.json()
            except ValueError as e:
                raise JokeFetchError(
                    f"Upstream returned a non-JSON body (status {response.status_code})"
                ) from e

    async def random_joke(self) -> str:
        data = await self._get_json(str(self.settings.chuck_norris_base_url), "/random")
        return _extract_field(data, "value")

    async def joke_by_category(self, category: str) -> str:
        # The category is passed through untouched; the upstream decides if it exists.
        data = await self._get_json(
            str(self.settings.chuck_norris_base_url),
            "/random",
            params={"category": category},
        )
        return _extract_field(data, "value")

    async def categories(self) -> str:
        data = await self._get_json(
            str(self.settings.chuck_norris_base_url), "/categories"
        )
        return _join_categories(data)

    async def dad_joke(self) -> str:
        data = await self._get_json(
            str(self.settings.dad_joke_base_url),
            "/",
            headers={"Accept": "application/json"},
        )
        return _extract_field(data, "joke")

    async def fetch_joke(self, kind: JokeKind, param: Optional[str] = None) -> str:
        """Dispatches to the fetch for ``kind``; ``param`` is the category for ``by-category``."""
        if kind == "random":
            return await self.random_joke()
        if kind == "by-category":
            if param is None:
                raise ValueError("by-category requires a category")
            return await self.joke_by_category(param)
        if kind == "categories":
            return await self.categories()
        if kind == "dad-joke":
            return await self.dad_joke()
        raise ValueError(f"Unknown joke kind: {kind!r}")
