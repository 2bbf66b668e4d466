import html
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status as http_status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, StreamingResponse

from .config import ServerSettings
from .joke_client import JokeClient, JokeFetchError
from .models import METHOD_NOT_ALLOWED
from .push import PushSession

logger = logging.getLogger(__name__)

router = APIRouter()

JOKE_PAGE = """
<html>
  <head>
    <title>Joke Server</title>
    <style>
      body {{
        font-family: Arial, sans-serif;
        background: #f8f8f8;
        display: flex;
        height: 100vh;
        align-items: center;
        justify-content: center;
      }}
      .joke {{
        background: #fff;
        padding: 2rem;
        border-radius: 10px;
        box-shadow: 0 2px 8px rgba(0,0,0,0.2);
        max-width: 600px;
        text-align: center;
      }}
    </style>
  </head>
  <body>
    <div class="joke">
      <h2>Chuck Norris Joke</h2>
      <p>{joke}</p>
    </div>
  </body>
</html>
"""


def get_joke_client(request: Request) -> JokeClient:
    return request.app.state.joke_client


def get_server_settings(request: Request) -> ServerSettings:
    return request.app.state.settings


# MCP endpoint: only POST is served (see McpEndpoint)


@router.get("/mcp")
@router.delete("/mcp")
async def mcp_method_not_allowed():
    return JSONResponse(
        METHOD_NOT_ALLOWED.model_dump(),
        status_code=http_status.HTTP_405_METHOD_NOT_ALLOWED,
    )


# Web routes


@router.get("/", response_class=HTMLResponse)
async def joke_page(client: JokeClient = Depends(get_joke_client)):
    try:
        joke = await client.fetch_joke("random")
    except JokeFetchError as e:
        logger.error("Failed to load joke: %s", e)
        return PlainTextResponse(
            "Could not fetch joke.",
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return HTMLResponse(JOKE_PAGE.format(joke=html.escape(joke)))


@router.get("/sse")
async def joke_stream(
    request: Request,
    client: JokeClient = Depends(get_joke_client),
    settings: ServerSettings = Depends(get_server_settings),
):
    if not settings.enable_sse:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND)

    session = PushSession(
        lambda: client.fetch_joke("random"),
        interval=settings.push_interval,
        is_disconnected=request.is_disconnected,
    )
    logger.info("Client connected to /sse")
    return StreamingResponse(
        session.events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.get("/health", response_class=PlainTextResponse)
async def health_check():
    return PlainTextResponse("Healthy")
