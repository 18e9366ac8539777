"""FastAPI application factory."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from mwb.auth.router import router as auth_router
from mwb.bookmarks.router import router as bookmarks_router
from mwb.config import get_settings
from mwb.database import close_db, get_session_factory, init_db
from mwb.health.router import router as health_router
from mwb.history.router import router as history_router
from mwb.lists.router import public_router as public_lists_router
from mwb.lists.router import router as lists_router
from mwb.metrics.router import router as metrics_router
from mwb.middleware import setup_middleware
from mwb.preferences.router import router as settings_router
from mwb.progress.router import router as progress_router
from mwb.redis_client import close_redis, init_redis
from mwb.users.router import router as users_router
from mwb.workers.sweeper import ExpirySweeper

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(
        settings.database_url,
        echo=settings.database_echo,
        create_tables=settings.auto_create_tables,
    )
    await init_redis(settings.redis_url)

    sweeper: ExpirySweeper | None = None
    sweeper_task: asyncio.Task[None] | None = None
    if settings.sweep_interval_seconds > 0:
        sweeper = ExpirySweeper(get_session_factory(), settings.sweep_interval_seconds)
        sweeper_task = asyncio.create_task(sweeper.start())

    logger.info("api_started", environment=settings.environment, version=settings.app_version)

    yield

    if sweeper is not None and sweeper_task is not None:
        await sweeper.stop()
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="MWB API",
        description="Backend for the media tracking client: key-based accounts, progress, history and lists",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(progress_router)
    app.include_router(history_router)
    app.include_router(bookmarks_router)
    app.include_router(settings_router)
    app.include_router(lists_router)
    app.include_router(public_lists_router)
    app.include_router(metrics_router)

    return app


app = create_app()
