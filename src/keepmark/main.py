"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything that depends on configuration (database engine,
session factory, token issuer) is built here from one Settings value
and stored on app.state, so two apps with two configs can coexist
(which is exactly what the tests do).

Lifespan manages startup/shutdown. Middleware, CORS, error handlers
and routers all registered here.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from keepmark import __version__
from keepmark.api import api_router
from keepmark.auth.jwt import TokenIssuer
from keepmark.config import Settings, get_settings
from keepmark.db.engine import build_engine, build_session_factory
from keepmark.errors import register_error_handlers
from keepmark.logs import configure_logging
from keepmark.middleware.request_id import RequestIdMiddleware
from keepmark.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Schema creation is Alembic's job (or `keepmark init-db`),
    not the app's.
    """
    settings: Settings = app.state.settings
    logger.info(
        "keepmark.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("keepmark.shutdown")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Keepmark",
        description="Personal bookmarks with per-user access control",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_issuer = TokenIssuer.from_settings(settings)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    return app
