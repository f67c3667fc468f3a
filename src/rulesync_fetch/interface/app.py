"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from rulesync_fetch.interface.dependencies import get_base_dir, shutdown, startup
from rulesync_fetch.interface.error_handlers import register_error_handlers
from rulesync_fetch.interface.routes import router

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the shared HTTP client for the lifetime of the app."""
    await startup()
    logger.info("rulesync-fetch API ready; writing below %s", get_base_dir())
    try:
        yield
    finally:
        await shutdown()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Rulesync Fetch",
        version=API_VERSION,
        description=(
            "Fetches rules, commands, subagents, skills and MCP/ignore/hooks "
            "files from a remote repository into the local project, either "
            "in the canonical .rulesync layout or converted for one AI tool."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": API_VERSION}

    return app
