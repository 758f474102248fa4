"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything with state (engine, session factory, Redis client,
settings) hangs off app.state, so a test can build a second app against
an in-memory database without touching globals. Lifespan manages
startup/shutdown (schema, Redis, engine disposal).
"""

from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as aioredis
import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from stormtask import __version__
from stormtask.api import api_router
from stormtask.config import Settings, settings as default_settings
from stormtask.db.engine import build_engine, build_session_factory, init_schema
from stormtask.middleware.headers import RequestIdMiddleware, SecurityHeadersMiddleware
from stormtask.middleware.rate_limit import RateLimitMiddleware
from stormtask.services.errors import StorageError

logger = structlog.get_logger()


async def connect_redis(url: str) -> Optional[aioredis.Redis]:
    """Open the Redis client used for rate limiting, or None if unreachable."""
    client = aioredis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        logger.warning("stormtask.redis_unavailable", error=str(e))
        await client.aclose()
        return None
    logger.info("stormtask.redis_connected", url=url)
    return client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Schema creation is idempotent, so restarting is safe.
    """
    settings: Settings = app.state.settings
    logger.info(
        "stormtask.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    await init_schema(app.state.engine)
    logger.info("stormtask.schema_ready")

    # Rate limiting is optional; the app works without Redis
    app.state.redis = await connect_redis(settings.redis_url)

    yield

    logger.info("stormtask.shutdown")
    if app.state.redis is not None:
        await app.state.redis.aclose()
    await app.state.engine.dispose()


# ─── Error handlers ──────────────────────────────────────


async def handle_validation_error(request: Request, exc: RequestValidationError):
    # Body that isn't JSON at all → 400; JSON with wrong fields → 422.
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        return JSONResponse(status_code=400, content={"detail": "Malformed JSON body"})
    return await request_validation_exception_handler(request, exc)


async def handle_storage_error(request: Request, exc: Exception):
    logger.error(
        "stormtask.storage_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings

    app = FastAPI(
        title="StormTask",
        description="Task management backend — users, groups and tasks",
        version=__version__,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url, echo=settings.debug)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.redis = None

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StorageError, handle_storage_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: stormtask.main:app)
app = create_app()
