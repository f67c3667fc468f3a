"""Serve the fetch API with uvicorn (``rulesync-fetch-server``)."""

from __future__ import annotations
import logging
import uvicorn
from rulesync_fetch.infrastructure.config import get_settings

def main() -> None:
    """Start the uvicorn ASGI server; HOST and PORT come from the settings."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    logging.getLogger(__name__).info(
        "Serving on %s:%d (files written below %s)",
        settings.host,
        settings.port,
        settings.base_dir,
    )
    uvicorn.run(
        "rulesync_fetch.interface.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
