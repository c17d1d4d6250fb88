"""Main module for the watchlist and alerts service."""
import logging
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from watchlist_sync.config import get_settings
from watchlist_sync.container import Container, init_container
from watchlist_sync.db.sessions import init_db
from watchlist_sync.routers import alerts_router, watchlist_router

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


def configure_logging(level: str | None = None) -> None:
    """Root logging config; level defaults to LOG_LEVEL."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def create_app(container: Container | None = None) -> FastAPI:
    """Build the app. Pass a container with overridden providers in tests."""
    container = container or init_container()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Create tables and resolve singletons at startup; close provider on shutdown."""
        engine = container.engine()
        init_db(engine)

        fastapi_app.state.container = container
        fastapi_app.state.watchlist_store = container.watchlist_store()
        fastapi_app.state.aggregation_engine = container.aggregation_engine()
        fastapi_app.state.alert_manager = container.alert_manager()
        fastapi_app.state.orphan_policy = container.orphan_policy()

        yield

        try:
            await container.market_data_provider().close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Error closing market data provider: %s", exc)
        engine.dispose()

    fastapi_app = FastAPI(
        title="Watchlist Sync",
        description="Watchlist with live pricing and price alerts",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.include_router(watchlist_router)
    fastapi_app.include_router(alerts_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    configure_logging()
    uvicorn.run("watchlist_sync.main:app", host="127.0.0.1", port=8001)


def _start_compose_postgres() -> None:
    result = subprocess.run(
        ["docker", "compose", "up", "-d", "postgres"],
        cwd=_PROJECT_ROOT,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        logger.error("Failed to start Postgres: %s", (result.stderr or result.stdout).strip())
        sys.exit(1)


def run_dev():
    """Development server with reload; brings up the compose Postgres unless DATABASE_URL is SQLite."""
    configure_logging("DEBUG")
    if not get_settings().database_url.startswith("sqlite"):
        _start_compose_postgres()
    uvicorn.run("watchlist_sync.main:app", host="0.0.0.0", port=8000, reload=True)
