"""Agent capability declarations for the order agent.

Exports:
    ORDER_CAPABILITIES: Seven order-tracking and pipeline capabilities.
"""

from __future__ import annotations

from src.dispatch.agents.base import AgentCapability
from src.dispatch.core.auth import MANAGEMENT_ROLES, UserType

ORDER_CAPABILITIES: list[AgentCapability] = [
    AgentCapability(
        action="getOrderStatus",
        description="Get the current status of an order",
        required_params=["orderId"],
        requires_auth=True,
    ),
    AgentCapability(
        action="getOrderDetails",
        description="Get full details of an order including garments",
        required_params=["orderId"],
        requires_auth=True,
    ),
    AgentCapability(
        action="getOrderHistory",
        description="Get order history for a customer",
        optional_params=["customerId", "limit"],
        requires_auth=True,
    ),
    AgentCapability(
        action="getLatestOrder",
        description="Get the most recent order for a customer",
        optional_params=["customerId"],
        requires_auth=True,
    ),
    AgentCapability(
        action="getOrdersByStatus",
        description="Get orders filtered by status (staff only)",
        required_params=["status"],
        optional_params=["branchId", "limit"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
    ),
    AgentCapability(
        action="getPipelineStats",
        description="Get pipeline statistics for a branch (staff only)",
        optional_params=["branchId"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
    ),
    AgentCapability(
        action="getTodaysSummary",
        description="Get today's order summary (management only)",
        optional_params=["branchId"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=MANAGEMENT_ROLES,
    ),
]
