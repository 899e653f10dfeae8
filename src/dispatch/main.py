"""FastAPI application factory.

Creates the app with logging middleware, CORS, a lifespan that wires the
agents on startup and closes Redis on shutdown, and the v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.dispatch.agents.wiring import initialize_agents
from src.dispatch.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.dispatch.api.v1.router import router as v1_router
from src.dispatch.config import get_settings
from src.dispatch.core.redis import close_redis


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: register agents on startup, close Redis on shutdown.

    Storage repositories are supplied by the deployment through
    ``app.state.agent_repositories``; without them only the agents that
    need no storage are registered.
    """
    log = structlog.get_logger(__name__)
    configure_structlog()

    try:
        agent_router = initialize_agents(getattr(app.state, "agent_repositories", None))
        app.state.agent_router = agent_router
        log.info("agent_router_initialized", agent_count=len(agent_router))
    except Exception:
        log.warning("agent_router_init_failed", exc_info=True)

    yield

    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Agent Dispatch API",
        version="0.1.0",
        description="In-process dispatch layer for the conversational assistant and its specialists",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    if settings.CORS_ALLOWED_ORIGINS == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (outermost, logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    app.include_router(v1_router)

    return app


# Module-level app for uvicorn
app = create_app()
