"""Health check endpoints.

Provides liveness (/health) and readiness (/health/ready). Readiness checks
Redis only when conversation history is stored there.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.dispatch.agents.router import AgentRouter
from src.dispatch.api.deps import get_router
from src.dispatch.config import HistoryBackend, get_settings
from src.dispatch.core.redis import get_redis_pool

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check. No external dependencies are checked."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


async def _check_dependencies(agent_router: AgentRouter) -> dict:
    settings = get_settings()
    checks: dict = {
        "agents": len(agent_router),
        "completion": "ok" if settings.ANTHROPIC_API_KEY or settings.OPENAI_API_KEY else "no_keys",
        "redis": "not_used",
    }

    if settings.HISTORY_BACKEND == HistoryBackend.redis:
        try:
            pong = await get_redis_pool().ping()
            checks["redis"] = "ok" if pong else "error"
        except Exception as e:
            checks["redis"] = "error"
            checks["redis_error"] = str(e)

    return checks


@router.get("/health/ready")
async def readiness_check(agent_router: AgentRouter = Depends(get_router)):
    """Readiness check: agents registered and, if used, Redis reachable.

    Returns 200 when ready, 503 otherwise. A missing completion key is not
    fatal; the orchestrator falls back to keyword replies.
    """
    checks = await _check_dependencies(agent_router)
    ready = checks["agents"] > 0 and checks["redis"] in ("ok", "not_used")

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )
