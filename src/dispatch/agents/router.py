"""Agent router: registry and single entry point for agent requests.

The AgentRouter is the central directory of all registered agents and the
only path by which requests reach them. It:
- Registers and unregisters agents by name (last registration wins)
- Validates the request envelope before any agent sees it
- Delegates to the target agent's process_request()
- Builds fresh request ids for internally generated sub-requests
- Lists every agent's actions for capability discovery

route() never raises: envelope faults, unknown agents and unexpected
exceptions all come back as AgentResponse values.

A module-level singleton is provided via get_agent_router() for
application-wide access.
"""

from __future__ import annotations

import random
import string
import time
from typing import Any

import structlog

from src.dispatch.agents.base import (
    AgentRequest,
    AgentResponse,
    BaseAgent,
    ResponseStatus,
)
from src.dispatch.core.auth import AuthContext

logger = structlog.get_logger(__name__)

ROUTER_NAME = "agent-router"

_BASE36 = string.digits + string.ascii_lowercase


def generate_request_id() -> str:
    """Return a new request id of the form ``req_{epoch_ms}_{7 base36 chars}``."""
    suffix = "".join(random.choices(_BASE36, k=7))
    return f"req_{int(time.time() * 1000)}_{suffix}"


class AgentRouter:
    """Registry of agents plus envelope validation and dispatch.

    Designed for use in a single async event loop (FastAPI/uvicorn).
    Registration normally happens once at startup through initialize_agents().
    """

    def __init__(self) -> None:
        self._agents: dict[str, BaseAgent] = {}

    # ── Registration ────────────────────────────────────────────────────────

    def register(self, agent: BaseAgent) -> None:
        """Register an agent under its name, replacing any previous one."""
        if agent.name in self._agents:
            logger.warning("agent_replaced", agent=agent.name)
        self._agents[agent.name] = agent
        logger.info(
            "agent_registered",
            agent=agent.name,
            actions=[c.action for c in agent.capabilities],
        )

    def unregister(self, name: str) -> None:
        """Remove an agent by name. Unknown names are ignored."""
        if self._agents.pop(name, None) is not None:
            logger.info("agent_unregistered", agent=name)

    def get_agent(self, name: str) -> BaseAgent | None:
        return self._agents.get(name)

    def has_agent(self, name: str) -> bool:
        return name in self._agents

    def get_all_agents(self) -> dict[str, BaseAgent]:
        """Return a copy of the name-to-agent mapping."""
        return dict(self._agents)

    def get_all_capabilities(self) -> list[dict[str, Any]]:
        """List every registered agent with its actions.

        Returns:
            One ``{"agent", "description", "capabilities"}`` dict per agent,
            where capabilities is a list of ``{"action", "description"}``.
        """
        return [agent.to_routing_info() for agent in self._agents.values()]

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, name: str) -> bool:
        return name in self._agents

    # ── Routing ─────────────────────────────────────────────────────────────

    async def route(self, request: AgentRequest) -> AgentResponse:
        """Validate the envelope and deliver the request to its target agent.

        Checks, in order: request id, target agent, action, auth context,
        session id. The first missing field produces an error response from
        the router; an unregistered target produces not_found. Otherwise the
        agent's response is returned unchanged.
        """
        envelope_error = self._validate_envelope(request)
        if envelope_error is not None:
            logger.warning(
                "request_rejected",
                request_id=request.request_id,
                to_agent=request.to_agent,
                reason=envelope_error,
            )
            return self._router_response(request, ResponseStatus.ERROR, envelope_error)

        agent = self._agents.get(request.to_agent)
        if agent is None:
            logger.warning("agent_not_found", to_agent=request.to_agent)
            return self._router_response(
                request, ResponseStatus.NOT_FOUND, f"Agent not found: {request.to_agent}"
            )

        start_time = time.monotonic()
        try:
            response = await agent.process_request(request)
        except Exception as exc:
            logger.error(
                "route_failed",
                request_id=request.request_id,
                to_agent=request.to_agent,
                action=request.action,
                error=str(exc),
                exc_info=True,
            )
            return self._router_response(
                request, ResponseStatus.ERROR, str(exc) or type(exc).__name__
            )

        logger.info(
            "request_routed",
            request_id=request.request_id,
            from_agent=request.from_agent,
            to_agent=request.to_agent,
            action=request.action,
            status=response.status.value,
            elapsed_ms=round((time.monotonic() - start_time) * 1000, 2),
        )
        return response

    async def send_request(
        self,
        to_agent: str,
        action: str,
        params: dict[str, Any],
        auth: AuthContext,
        from_agent: str = "system",
    ) -> AgentResponse:
        """Build a request with a fresh id and timestamp, then route it."""
        request = AgentRequest(
            request_id=generate_request_id(),
            from_agent=from_agent,
            to_agent=to_agent,
            action=action,
            params=params,
            auth=auth,
        )
        return await self.route(request)

    @staticmethod
    def _validate_envelope(request: AgentRequest) -> str | None:
        if not request.request_id:
            return "Missing request ID"
        if not request.to_agent:
            return "Missing target agent"
        if not request.action:
            return "Missing action"
        if request.auth is None:
            return "Missing authentication context"
        if not request.auth.session_id:
            return "Missing session ID"
        return None

    @staticmethod
    def _router_response(
        request: AgentRequest, status: ResponseStatus, error: str
    ) -> AgentResponse:
        return AgentResponse(
            request_id=request.request_id,
            from_agent=ROUTER_NAME,
            status=status,
            error=error,
        )


# ── Module-level singleton ───────────────────────────────────────────────────

_router: AgentRouter | None = None


def get_agent_router() -> AgentRouter:
    """Get the global AgentRouter singleton, creating it on first call."""
    global _router
    if _router is None:
        _router = AgentRouter()
    return _router


def reset_agent_router() -> None:
    """Drop the global router so the next get_agent_router() starts empty."""
    global _router
    _router = None
