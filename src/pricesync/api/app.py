"""FastAPI application factory."""

from typing import Any

from fastapi import FastAPI

from pricesync.api import routes


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.

    Returns:
        Configured FastAPI application. Route handlers expect ``store``,
        ``scheduler`` and ``history_limit`` on app.state.
    """
    app = FastAPI(
        title="On-chain Price History",
        lifespan=lifespan,
    )
    app.state.history_limit = 1000
    app.include_router(routes.router, prefix="/api")
    return app
