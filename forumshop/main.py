"""
FastAPI application entry point.
Mounts routes, CORS, Prometheus metrics, exception handlers; owns the
startup/shutdown boundary for the database engine.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from forumshop.api.v1.router import api_router
from forumshop.config import Settings, get_settings
from forumshop.core.handlers import register_exception_handlers
from forumshop.db.session import create_schema, engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create missing tables when enabled. Shutdown: release pooled connections."""
    settings: Settings = app.state.settings
    if settings.auto_create_schema:
        try:
            await create_schema()
        except Exception:
            # Serve anyway; requests will report the database failure themselves
            logger.exception("Schema creation failed")
    yield
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title=settings.app_name,
        description="Categories, items, inventories, bags, credits and purchases for the forum shop.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS for the forum front end
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.forum_url],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-KEY"],
    )

    # Prometheus metrics at /metrics
    app.mount("/metrics", make_asgi_app())

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
