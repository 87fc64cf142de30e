"""
Net&Connect portal FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from portal import config
from portal.middleware.rate_limit import rate_limiter
from portal.repos.used_link_repo import used_link_repo
from portal.routes import auth_routes, directory_routes, events_routes, user_routes

logging.basicConfig(
    level=config.settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def cleanup_task():
    """
    Background task to forget expired magic links and old rate limit entries.

    Runs every 60 seconds.
    """
    while True:
        try:
            deleted_count = used_link_repo.cleanup_expired()
            if deleted_count > 0:
                logger.info("Cleaned up %d expired magic links", deleted_count)

            rate_limiter.cleanup_old_entries(max_age_seconds=2 * 3600)
        except Exception:
            logger.exception("Error in cleanup task")

        await asyncio.sleep(60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Start the cleanup task on startup, cancel it on shutdown.
    """
    cleanup_task_handle = asyncio.create_task(cleanup_task())
    logger.info("Background cleanup task started")

    yield

    cleanup_task_handle.cancel()
    try:
        await cleanup_task_handle
    except asyncio.CancelledError:
        logger.info("Background cleanup task stopped")


app = FastAPI(
    title="Net&Connect",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(auth_routes.router)
app.include_router(user_routes.router)
app.include_router(directory_routes.router)
app.include_router(events_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
