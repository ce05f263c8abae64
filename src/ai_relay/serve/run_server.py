"""Launch the relay under uvicorn, reading configuration from the environment (and .env)."""
from __future__ import annotations
import logging

import uvicorn

from ai_relay.common.logging_setup import setup_logging
from ai_relay.common.settings import Settings, load_env_file
from ai_relay.serve.fastapi_app import create_app

LOGGER = logging.getLogger("ai_relay.serve.run")

def main() -> None:
    load_env_file()
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    app = create_app(settings)
    LOGGER.info("Server ready on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)

if __name__ == "__main__":
    main()
