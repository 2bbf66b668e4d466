import contextlib
import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from starlette.routing import Route

from .config import ServerSettings, get_settings
from .joke_client import JokeClient
from .mcp_server import McpEndpoint, create_mcp_server
from .operations import JokeOperations
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[ServerSettings] = None,
    joke_client: Optional[JokeClient] = None,
) -> FastAPI:
    settings = settings or get_settings()
    joke_client = joke_client or JokeClient(settings)
    mcp = create_mcp_server(JokeOperations(joke_client), settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        async with mcp.session_manager.run():
            yield

    app = FastAPI(title="Joke Server", lifespan=lifespan)
    app.state.settings = settings
    app.state.joke_client = joke_client
    app.state.mcp = mcp

    app.router.routes.append(
        Route("/mcp", endpoint=McpEndpoint(mcp.session_manager), methods=["POST"])
    )
    app.include_router(router)
    return app


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = create_app(settings)
    except Exception:
        logger.exception("MCP setup failed")
        sys.exit(1)

    logger.info("Server ready on http://localhost:%d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
