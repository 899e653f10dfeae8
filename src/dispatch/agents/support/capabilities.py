"""Agent capability declarations for the support agent."""

from __future__ import annotations

from src.dispatch.agents.base import AgentCapability
from src.dispatch.agents.support.schemas import (
    CreateTicketParams,
    TicketFilterParams,
    UpdateTicketParams,
)
from src.dispatch.core.auth import UserType

SUPPORT_CAPABILITIES: list[AgentCapability] = [
    AgentCapability(
        action="createTicket",
        description="Create a support ticket",
        required_params=["subject", "description"],
        optional_params=["priority", "orderId"],
        input_schema=CreateTicketParams,
    ),
    AgentCapability(
        action="getTicketStatus",
        description="Get status of a support ticket",
        required_params=["ticketId"],
        requires_auth=True,
    ),
    AgentCapability(
        action="getMyTickets",
        description="Get all tickets for the current user",
        optional_params=["status"],
        requires_auth=True,
        input_schema=TicketFilterParams,
    ),
    AgentCapability(
        action="escalateToHuman",
        description="Request to speak with a human support agent",
        optional_params=["reason"],
    ),
    AgentCapability(
        action="getContactInfo",
        description="Get contact information for support",
    ),
    AgentCapability(
        action="getAllTickets",
        description="Get all support tickets (staff only)",
        optional_params=["status", "limit"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        input_schema=TicketFilterParams,
    ),
    AgentCapability(
        action="updateTicket",
        description="Update a support ticket (staff only)",
        required_params=["ticketId"],
        optional_params=["status", "assignedTo", "notes"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        input_schema=UpdateTicketParams,
    ),
]
