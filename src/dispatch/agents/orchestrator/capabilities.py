"""Agent capability declarations for the orchestrator.

Exports:
    ORCHESTRATOR_CAPABILITIES: chat and clearHistory, both public.
"""

from __future__ import annotations

from src.dispatch.agents.base import AgentCapability

ORCHESTRATOR_CAPABILITIES: list[AgentCapability] = [
    AgentCapability(
        action="chat",
        description="Process a chat message and generate a human-like response",
        required_params=["message"],
        optional_params=["sessionId"],
    ),
    AgentCapability(
        action="clearHistory",
        description="Clear conversation history for the caller's own session",
        required_params=["sessionId"],
    ),
]
