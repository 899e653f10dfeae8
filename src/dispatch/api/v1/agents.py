"""Agent dispatch endpoints.

Every protocol outcome, including envelope faults, unknown agents and
authorization denials, is returned as an AgentResponse with HTTP 200. Only
an invalid bearer token is an HTTP error (401).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from src.dispatch.agents.base import AgentRequest
from src.dispatch.agents.router import AgentRouter, generate_request_id
from src.dispatch.api.deps import get_auth_context, get_router
from src.dispatch.core.auth import AuthContext
from src.dispatch.schemas.agents import AgentCallRequest, AgentRoutingInfo

router = APIRouter(prefix="/api/v1/agents", tags=["agents"])


@router.post("")
async def call_agent(
    body: AgentCallRequest,
    auth: AuthContext = Depends(get_auth_context),
    agent_router: AgentRouter = Depends(get_router),
) -> dict[str, Any]:
    """Route one action to one agent and return its response envelope."""
    request = AgentRequest(
        request_id=generate_request_id(),
        from_agent=body.source,
        to_agent=body.to_agent,
        action=body.action,
        params=body.params,
        auth=auth,
    )
    response = await agent_router.route(request)
    return response.model_dump(mode="json", by_alias=True)


@router.get("/capabilities", response_model=list[AgentRoutingInfo])
async def list_capabilities(agent_router: AgentRouter = Depends(get_router)):
    """List every registered agent and the actions it exposes."""
    return agent_router.get_all_capabilities()
