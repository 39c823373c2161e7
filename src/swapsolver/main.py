"""Main entry point - derives keys and runs the API."""

import asyncio
import logging
import signal
import sys

import uvicorn

from swapsolver.api.app import create_app
from swapsolver.config import Settings, get_settings
from swapsolver.context import AppContext
from swapsolver.errors import InvalidSecret

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    log_level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


class Application:
    """Runs the swap solver API."""

    def __init__(self):
        self.settings = get_settings()
        self.context = None
        self.server = None

    async def start(self):
        """Start all services."""
        configure_logging(self.settings)

        logger.info("Starting swap solver...")
        logger.info(f"Environment: {self.settings.environment}")

        # Keys are derived once; a bad phrase stops startup here
        self.context = AppContext.build(self.settings)

        app = create_app(self.context)
        config = uvicorn.Config(
            app,
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level="debug" if self.settings.debug else "info",
        )
        self.server = uvicorn.Server(config)
        logger.info(f"Starting API server on {self.settings.api_host}:{self.settings.api_port}")

        try:
            await self.server.serve()
        finally:
            await self._cleanup()

    async def _cleanup(self):
        """Cleanup resources."""
        logger.info("Cleaning up...")
        if self.context is not None:
            await self.context.aclose()
        logger.info("Cleanup complete")

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested")
        if self.server is not None:
            self.server.should_exit = True


def main():
    """Main entry point."""
    app = Application()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except InvalidSecret as e:
        logger.error(f"Cannot derive wallet keys: {e}. Set SEED_PHRASE to a valid BIP-39 phrase.")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
