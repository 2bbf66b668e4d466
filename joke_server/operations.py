from typing import Dict

from .joke_client import JokeClient
from .models import ToolEnvelope

OPERATION_DESCRIPTIONS: Dict[str, str] = {
    "get-chuck-joke": "Get a random Chuck Norris joke",
    "get-chuck-joke-by-category": "Get a random Chuck Norris joke by category",
    "get-chuck-categories": "Get Chuck Norris joke categories",
    "get-dad-joke": "Get a random dad joke",
}


class JokeOperations:
    """The named joke operations, each wrapping one fetch in a ``ToolEnvelope``."""

    def __init__(self, client: JokeClient):
        self.client = client

    async def chuck_joke(self) -> ToolEnvelope:
        return ToolEnvelope.from_text(await self.client.fetch_joke("random"))

    async def chuck_joke_by_category(self, category: str) -> ToolEnvelope:
        return ToolEnvelope.from_text(
            await self.client.fetch_joke("by-category", category)
        )

    async def chuck_categories(self) -> ToolEnvelope:
        return ToolEnvelope.from_text(await self.client.fetch_joke("categories"))

    async def dad_joke(self) -> ToolEnvelope:
        return ToolEnvelope.from_text(await self.client.fetch_joke("dad-joke"))
