"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from trackrecord.api.errors import register_exception_handlers
from trackrecord.api.v1 import api_router
from trackrecord.core.config import Settings, get_settings
from trackrecord.core.middleware import CORSMiddleware, RateLimitMiddleware, RecoverMiddleware
from trackrecord.core.ratelimit import ClientRateTracker
from trackrecord.db.session import create_db_engine, create_session_maker
from trackrecord.repositories import Models

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: start the rate limiter sweep; shutdown: stop it and release the pool."""
    app.state.rate_tracker.start()
    logger.info("starting %s (%s)", app.state.settings.app_name, app.state.settings.environment)
    yield
    await app.state.rate_tracker.stop()
    await app.state.engine.dispose()


def create_application(settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)
    engine = engine or create_db_engine(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.models = Models.from_sessions(create_session_maker(engine))
    app.state.rate_tracker = ClientRateTracker(rps=settings.limiter_rps, burst=settings.limiter_burst)

    register_exception_handlers(app)

    # Added innermost first: the request sees recover -> CORS -> rate limit -> router
    app.add_middleware(RateLimitMiddleware, tracker=app.state.rate_tracker, enabled=settings.limiter_enabled)
    app.add_middleware(CORSMiddleware)
    app.add_middleware(RecoverMiddleware)

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
