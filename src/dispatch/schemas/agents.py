"""Pydantic schemas for the agent API endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AgentCallRequest(BaseModel):
    """Body of ``POST /api/v1/agents``.

    Envelope fields default to empty so a missing one comes back as a
    protocol error from the router rather than an HTTP 422.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    to_agent: str = Field(default="", description="Target agent name, e.g. 'order-agent'")
    action: str = Field(default="", description="Capability action, e.g. 'getOrderStatus'")
    params: dict[str, Any] = Field(default_factory=dict, description="Action parameters")
    source: str = Field(
        default="website-chatbot", description="Calling surface, recorded as fromAgent"
    )


class AgentCapabilitySummary(BaseModel):
    action: str
    description: str


class AgentRoutingInfo(BaseModel):
    """One registered agent with its actions."""

    agent: str
    description: str
    capabilities: list[AgentCapabilitySummary] = Field(default_factory=list)
