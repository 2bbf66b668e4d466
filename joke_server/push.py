"""Periodic joke push over a server-sent event stream.

A ``PushSession`` lives exactly as long as one open ``/sse`` connection. It is
ACTIVE from the moment it is created: one joke goes out immediately, then one
per tick. When the client goes away the session becomes CLOSED and stays that
way; the tick schedule stops and nothing else is fetched or written.

The whole session runs as a single async generator, consumed by a single
task. A tick and a disconnect can therefore never interleave: either the
generator is suspended at the tick wait (and a disconnect cancels it there), or
it is mid-fetch (and the disconnect is seen before the next write).
"""

import asyncio
import enum
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from .joke_client import JokeFetchError

logger = logging.getLogger(__name__)

ERROR_EVENT_TEXT = "Error fetching joke"

FetchFn = Callable[[], Awaitable[str]]
DisconnectCheck = Callable[[], Awaitable[bool]]


class SessionState(str, enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"


def format_event(text: str) -> str:
    """Encodes ``text`` as one SSE event, one ``data:`` line per line of text."""
    lines = text.splitlines() or [""]
    return "".join(f"data: {line}\n" for line in lines) + "\n"


class PushSession:
    def __init__(
        self,
        fetch: FetchFn,
        interval: float = 10.0,
        is_disconnected: Optional[DisconnectCheck] = None,
        name: str = "sse",
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._fetch = fetch
        self.interval = interval
        self._is_disconnected = is_disconnected
        self.name = name
        self.state = SessionState.ACTIVE
        self.events_sent = 0

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def close(self) -> None:
        """Moves the session to CLOSED. Safe to call more than once."""
        if self.closed:
            return
        self.state = SessionState.CLOSED
        logger.info(
            "Client disconnected from /%s after %d event(s)", self.name, self.events_sent
        )

    async def _next_event(self) -> str:
        try:
            text = await self._fetch()
        except JokeFetchError as e:
            logger.warning("Push fetch failed: %s", e)
            text = ERROR_EVENT_TEXT
        return format_event(text)

    async def _client_gone(self) -> bool:
        if self._is_disconnected is None:
            return False
        return await self._is_disconnected()

    async def events(self) -> AsyncIterator[str]:
        """Yields encoded events until the client disconnects.

        Each tick waits a full interval after the previous event went out, so
        a slow fetch delays the schedule instead of bunching events together.
        """
        try:
            event = await self._next_event()
            if self.closed:
                return
            self.events_sent += 1
            yield event

            while not self.closed:
                await asyncio.sleep(self.interval)
                if await self._client_gone():
                    break
                event = await self._next_event()
                if self.closed:
                    break
                self.events_sent += 1
                yield event
        finally:
            self.close()
