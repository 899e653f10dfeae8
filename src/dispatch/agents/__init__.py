"""Agent dispatch package.

Provides the request/response protocol, the abstract BaseAgent every
specialist implements, and the router that validates envelopes and delivers
requests. Specialists live in subpackages; initialize_agents() in
``wiring`` builds and registers them.

Exports:
    BaseAgent: Abstract base class for all agents.
    AgentCapability: Declared action with its access rules.
    AgentRequest: Request envelope.
    AgentResponse: Response envelope.
    ResponseStatus: Outcome enum (success, error, unauthorized, not_found).
    AgentRouter: Registry and single entry point for requests.
    get_agent_router: Singleton accessor for the global router.
"""

from __future__ import annotations

from src.dispatch.agents.base import (
    AgentCapability,
    AgentRequest,
    AgentResponse,
    BaseAgent,
    ResponseStatus,
)
from src.dispatch.agents.router import AgentRouter, get_agent_router

__all__ = [
    "AgentCapability",
    "AgentRequest",
    "AgentResponse",
    "AgentRouter",
    "BaseAgent",
    "ResponseStatus",
    "get_agent_router",
]
