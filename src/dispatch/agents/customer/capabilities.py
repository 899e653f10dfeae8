"""Agent capability declarations for the customer agent."""

from __future__ import annotations

from src.dispatch.agents.base import AgentCapability
from src.dispatch.core.auth import MANAGEMENT_ROLES, UserType

CUSTOMER_CAPABILITIES: list[AgentCapability] = [
    AgentCapability(
        action="getProfile",
        description="Get customer profile information",
        optional_params=["customerId"],
        requires_auth=True,
    ),
    AgentCapability(
        action="getOrderSummary",
        description="Get a summary of customer's order history",
        optional_params=["customerId"],
        requires_auth=True,
    ),
    AgentCapability(
        action="getSpendHistory",
        description="Get customer spending history and statistics",
        optional_params=["customerId"],
        requires_auth=True,
    ),
    AgentCapability(
        action="searchCustomer",
        description="Search for customers by name or phone (staff only)",
        required_params=["query"],
        optional_params=["limit"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
    ),
    AgentCapability(
        action="getTopCustomers",
        description="Get top customers by spending (management only)",
        optional_params=["limit"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=MANAGEMENT_ROLES,
    ),
    AgentCapability(
        action="getRecentCustomers",
        description="Get recently registered customers (staff only)",
        optional_params=["limit"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
    ),
    AgentCapability(
        action="getCustomerInsights",
        description="Get detailed insights about a customer (staff only)",
        required_params=["customerId"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
    ),
]
