"""SnippetBox entry point: document store plus FastAPI server.

Can be run directly via `python -m snippetbox.main` or the `snippetbox` console script.
"""

from __future__ import annotations

import asyncio
import signal
from typing import Optional

import structlog
import uvicorn

from snippetbox import __version__
from snippetbox.api.app import create_app
from snippetbox.config import Settings
from snippetbox.db import open_store
from snippetbox.db.base import DocumentStore


def configure_logging(level: str = "info") -> None:
    """Configure structured logging for the whole process."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level=level.lower()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


logger = structlog.get_logger()


class ServerRunner:
    """Manages store and API server lifecycle and graceful shutdown."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.store: Optional[DocumentStore] = None
        self.uvicorn_server: Optional[uvicorn.Server] = None
        self.shutdown_event = asyncio.Event()

    async def run(self) -> None:
        """Open the document store, start the API server, wait for a signal."""
        settings = self.settings
        logger.info("snippetbox_starting", version=__version__, store_backend=settings.store_backend)

        self.store = await open_store(settings)

        app = create_app(store=self.store, settings=settings)
        logger.info("fastapi_app_created")

        config = uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level,
            access_log=False,
        )
        self.uvicorn_server = uvicorn.Server(config)
        logger.info("uvicorn_configured", host=settings.host, port=settings.port)

        def handle_shutdown(sig: int) -> None:
            logger.info("shutdown_signal_received", signal=sig)
            self.shutdown_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda s=sig: handle_shutdown(s))

        server_task = asyncio.create_task(self.uvicorn_server.serve())
        logger.info(
            "services_running",
            api_server=f"http://{settings.host}:{settings.port}",
            docs=f"http://{settings.host}:{settings.port}/docs",
        )

        # Either a signal or the server exiting on its own ends the run
        shutdown_task = asyncio.create_task(self.shutdown_event.wait())
        await asyncio.wait({server_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED)

        logger.info("initiating_graceful_shutdown")
        self.uvicorn_server.should_exit = True
        shutdown_task.cancel()

        try:
            await asyncio.wait_for(server_task, timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("shutdown_timeout")
            server_task.cancel()

        await self.store.close()
        logger.info("all_services_stopped")


async def main() -> None:
    """Main entry point."""
    settings = Settings()
    configure_logging(settings.log_level)
    runner = ServerRunner(settings)
    try:
        await runner.run()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt_received")
    except Exception as exc:
        logger.error("fatal_error", error=str(exc), error_type=type(exc).__name__)
        raise


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
