import inspect
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from routes.generate_route import router as generate_router
from routes.image_route import router as image_router
from routes.workspace_route import router as workspace_router
from services.thumbnail_generator import ThumbnailGenerator
from services.workspace.preview_registry import PreviewRegistry
from services.workspace.workspace_store import WorkspaceStore
from utils.settings import load_settings

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"
IN_PROCESS_PROXY_URL = "http://proxy.local"

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)


async def _close_client(client: Any) -> None:
    """Close an HTTP or OpenAI client if it exposes a close/aclose method."""
    if client is None:
        return
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception as exc:  # pylint: disable=broad-exception-caught
        # Shutdown errors must not mask the original shutdown reason.
        LOGGER.warning("Error while closing %s: %s", type(client).__name__, exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - settings (fails fast when OPENAI_API_KEY is missing)
      - the OpenAI async client used by the proxy endpoint
      - the preview registry and workspace store
      - the HTTP client the workspace controller uses to reach the proxy
    and attach them to `app.state`.
    """
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)
    app.state.settings = settings

    try:
        openai_client = AsyncOpenAI(api_key=settings.openai_api_key)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc
    app.state.openai_client = openai_client

    preview_registry = PreviewRegistry()
    app.state.preview_registry = preview_registry
    app.state.workspace_store = WorkspaceStore(
        preview_registry,
        thumbnails=ThumbnailGenerator(),
        max_images=settings.max_images,
    )

    # Without an external URL the proxy is reached in-process over ASGI.
    if settings.proxy_base_url:
        proxy_client = httpx.AsyncClient(base_url=settings.proxy_base_url, timeout=settings.proxy_timeout_seconds)
    else:
        proxy_client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url=IN_PROCESS_PROXY_URL,
            timeout=settings.proxy_timeout_seconds,
        )
    app.state.proxy_client = proxy_client
    LOGGER.info("Proxy client targeting %s", settings.proxy_base_url or "in-process ASGI app")

    try:
        yield
    finally:
        await _close_client(getattr(app.state, "proxy_client", None))
        await _close_client(getattr(app.state, "openai_client", None))


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Image Description and Keyword Generator", lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies the OpenAI and proxy clients are present.
        """
        state = request.app.state
        return {
            "ok": True,
            "openai_available": getattr(state, "openai_client", None) is not None,
            "proxy_available": getattr(state, "proxy_client", None) is not None,
        }

    # Register application routers
    app.include_router(generate_router)
    app.include_router(workspace_router)
    app.include_router(image_router)

    return app


app = create_app()
