"""Process entry point: load settings, configure logging, serve with uvicorn."""
from __future__ import annotations
import logging

import uvicorn

from gemini_relay.common.logging_setup import setup_logging
from gemini_relay.common.settings import load_settings
from gemini_relay.relay.fastapi_app import create_app

LOGGER = logging.getLogger("gemini_relay.server")


def main() -> None:
    setup_logging()
    settings = load_settings()
    setup_logging(settings.log_level)

    app = create_app(settings)
    LOGGER.info("Starting Gemini relay on %s:%s", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
