"""Entry point for the price history service.

Wires all components together, optionally serves the FastAPI app, and
starts the sync scheduler. When the API is enabled (default), the scheduler
and the API share a single asyncio event loop via uvicorn's programmatic API
and FastAPI's lifespan context manager.

Component wiring order (in _build_components):
1. AppSettings (configuration)
2. Logging setup
3. SolanaRpcClient (history + transaction provider)
4. RaydiumRegistry (venue registry)
5. PriceHistorySync (resolver, walker, fetcher, deriver)
6. PriceHistoryDatabase + PriceHistoryStore (persistence)
7. PriceHistoryScheduler (periodic driver)
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from pricesync.config import AppSettings
from pricesync.data.database import PriceHistoryDatabase
from pricesync.data.store import PriceHistoryStore
from pricesync.logging import get_logger, setup_logging
from pricesync.pipeline.observer import StructlogObserver
from pricesync.pipeline.sync import PriceHistorySync
from pricesync.scheduler import PriceHistoryScheduler
from pricesync.solana.raydium import RaydiumRegistry
from pricesync.solana.rpc_client import SolanaRpcClient


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all service components from settings.

    Note: Does NOT open the database -- that happens in the lifespan
    (API mode) or run() (headless mode).
    """
    client = SolanaRpcClient(settings.solana)
    registry = RaydiumRegistry(settings.solana)

    sync = PriceHistorySync.from_settings(
        client,
        registry,
        settings.sync,
        settings.solana,
        observer=StructlogObserver(),
    )

    database = PriceHistoryDatabase(settings.database.db_path)
    store = PriceHistoryStore(database)
    scheduler = PriceHistoryScheduler(store, sync, settings.sync)

    return {
        "client": client,
        "registry": registry,
        "sync": sync,
        "database": database,
        "store": store,
        "scheduler": scheduler,
    }


async def _close_components(components: dict[str, Any]) -> None:
    await components["client"].close()
    await components["registry"].close()
    await components["database"].close()


def _setup_signal_handlers(scheduler: PriceHistoryScheduler) -> None:
    """SIGINT/SIGTERM stop the scheduler after its current cycle.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("pricesync.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(scheduler.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database and run the scheduler for the app's lifetime."""
    logger = get_logger("pricesync.main")
    settings = app.state.settings
    components = app.state.components

    await components["database"].connect()

    app.state.store = components["store"]
    app.state.scheduler = components["scheduler"]
    app.state.history_limit = settings.api.history_limit

    scheduler_task = asyncio.create_task(components["scheduler"].start())
    logger.info("lifespan_started", scan_interval=settings.sync.scan_interval)

    yield

    await components["scheduler"].stop()
    scheduler_task.cancel()
    try:
        await scheduler_task
    except asyncio.CancelledError:
        pass

    await _close_components(components)
    logger.info("price_history_service_stopped")


async def run() -> None:
    """Run the price history service.

    When the API is enabled (API_ENABLED=true, the default) the scheduler
    runs inside the uvicorn server lifespan; otherwise it runs headless.
    """
    settings = AppSettings()

    setup_logging(settings.log_level)
    logger = get_logger("pricesync.main")

    components = _build_components(settings)

    if settings.api.enabled:
        from pricesync.api.app import create_app

        app = create_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        logger.info("starting_with_api", host=settings.api.host, port=settings.api.port)

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        _setup_signal_handlers(components["scheduler"])
        logger.info("starting_without_api", scan_interval=settings.sync.scan_interval)

        try:
            await components["database"].connect()
            await components["scheduler"].start()
        finally:
            await _close_components(components)
            logger.info("price_history_service_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
