"""FastAPI application factory for the farm edge."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from sqlalchemy.engine import make_url

from farmsync.config import get_settings
from farmsync.infrastructure.container import EdgeContainer, build_default_container
from farmsync.infrastructure.database import Base, async_session_factory, engine
from farmsync.infrastructure.logging.log_config import setup_logging
from farmsync.presentation.api.router import router as api_router
from farmsync.presentation.edge.proxy import router as edge_router

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite") or not url.database:
        return
    if url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — create tables, build the edge services, start them."""
    settings = get_settings()
    setup_logging(settings)

    if getattr(app.state, "container", None) is not None:
        # Pre-built (e.g. test) container: the caller owns its lifecycle
        yield
        return

    # 1. Create the cache / storage tables
    _ensure_sqlite_directory(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 2. Build and start the edge services (precache, activate, queue, connectivity)
    container = build_default_container(settings, async_session_factory)
    app.state.container = container
    await container.startup()
    logger.info("Edge ready in front of %s", settings.origin_url)

    yield

    # Shutdown
    await container.shutdown()
    app.state.container = None
    await engine.dispose()


def create_app(container: EdgeContainer | None = None) -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.container = container

    # Control API first; the catch-all edge proxy must stay last
    app.include_router(api_router)
    app.include_router(edge_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "farmsync.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
