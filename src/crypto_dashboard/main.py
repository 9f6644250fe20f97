"""Main module for the crypto dashboard API."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from crypto_dashboard.config import Settings
from crypto_dashboard.container import Container, init_container
from crypto_dashboard.db.sessions import init_db
from crypto_dashboard.routers import alerts_router, watchlist_router

logger = logging.getLogger(__name__)


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around container (a fresh wired one by default)."""
    if container is None:
        container = init_container(Settings.from_env().database_url)

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Create tables at startup; dispose of the engine on shutdown."""
        engine = fastapi_app.state.container.engine()
        init_db(engine)
        yield
        engine.dispose()

    fastapi_app = FastAPI(
        title="Crypto Dashboard API",
        description="Per-user watchlist and alert storage for the crypto dashboard",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.container = container

    fastapi_app.include_router(watchlist_router)
    fastapi_app.include_router(alerts_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


def run():
    """Run the server (uvicorn)."""
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(
        "crypto_dashboard.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )
