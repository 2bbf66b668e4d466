import json
import logging
from typing import Annotated, Any, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from mcp.types import TextContent
from pydantic import Field
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

from .config import ServerSettings
from .models import RequestId, ToolEnvelope, internal_error
from .operations import OPERATION_DESCRIPTIONS, JokeOperations

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-streamable-http"
SERVER_VERSION = "1.0.0"


def _to_mcp_content(envelope: ToolEnvelope) -> List[TextContent]:
    return [TextContent(type="text", text=item.text) for item in envelope.content]


def create_mcp_server(operations: JokeOperations, settings: ServerSettings) -> FastMCP:
    """Builds a FastMCP server exposing the joke operations as tools.

    The server is stateless and answers with plain JSON, so every POST to
    ``/mcp`` is a self-contained request/response exchange.
    """
    mcp = FastMCP(
        name=SERVER_NAME,
        host=settings.host,
        port=settings.port,
        stateless_http=True,
        json_response=True,
    )

    @mcp.tool(
        name="get-chuck-joke",
        description=OPERATION_DESCRIPTIONS["get-chuck-joke"],
        structured_output=False,
    )
    async def get_chuck_joke() -> List[TextContent]:
        return _to_mcp_content(await operations.chuck_joke())

    @mcp.tool(
        name="get-chuck-joke-by-category",
        description=OPERATION_DESCRIPTIONS["get-chuck-joke-by-category"],
        structured_output=False,
    )
    async def get_chuck_joke_by_category(
        category: Annotated[
            str, Field(min_length=1, description="Category of the Chuck Norris joke")
        ],
    ) -> List[TextContent]:
        return _to_mcp_content(await operations.chuck_joke_by_category(category))

    @mcp.tool(
        name="get-chuck-categories",
        description=OPERATION_DESCRIPTIONS["get-chuck-categories"],
        structured_output=False,
    )
    async def get_chuck_categories() -> List[TextContent]:
        return _to_mcp_content(await operations.chuck_categories())

    @mcp.tool(
        name="get-dad-joke",
        description=OPERATION_DESCRIPTIONS["get-dad-joke"],
        structured_output=False,
    )
    async def get_dad_joke() -> List[TextContent]:
        return _to_mcp_content(await operations.dad_joke())

    # Creates the Streamable HTTP session manager; the returned app is unused
    # because /mcp is routed through McpEndpoint instead.
    mcp.streamable_http_app()
    return mcp


def _request_id(body: bytes) -> Optional[RequestId]:
    try:
        payload: Any = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    request_id = payload.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (str, int, float)):
        return None
    return request_id


class McpEndpoint:
    """ASGI endpoint for ``POST /mcp``.

    Hands the request to the MCP session manager and, if dispatch blows up
    before any part of the response went out, answers with a JSON-RPC
    internal error echoing the request id.
    """

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.info("Received MCP request")

        # Buffer the body so the request id is still available after the
        # transport has consumed the stream.
        chunks: List[bytes] = []
        while True:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunks.append(message.get("body", b""))
            if not message.get("more_body", False):
                break
        body = b"".join(chunks)

        replayed = False

        async def replay_receive() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.session_manager.handle_request(
                scope, replay_receive, tracking_send
            )
        except Exception:
            logger.exception("MCP error")
            if response_started:
                return
            response = JSONResponse(
                internal_error(_request_id(body)).model_dump(), status_code=500
            )
            await response(scope, receive, send)
