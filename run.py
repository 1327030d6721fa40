"""Entry point for the Auto Services Marketplace API.

Launches the FastAPI application with Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Host and port are read from the environment variables ``HOST`` and
``PORT``; the remaining configuration (``DATABASE_URL``, ``SECRET_KEY``
and so on) is read by ``auto_services_api.app.core.config``.

Usage:
    python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from auto_services_api.app.core.config import settings
from auto_services_api.app.core.logging_config import setup_logging


def build_config() -> Config:
    """Uvicorn configuration for the API.

    Defaults are ``0.0.0.0`` and ``5000``.
    """
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))
    return Config(
        app="auto_services_api.app.main:app",
        host=host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


async def main() -> None:
    """Serve the API until interrupted."""
    logger = setup_logging(settings.log_level, settings.log_file or None)
    config = build_config()
    logger.info("Starting %s on %s:%s", settings.project_name, config.host, config.port)
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
