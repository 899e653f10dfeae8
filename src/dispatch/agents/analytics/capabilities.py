"""Agent capability declarations for the analytics agent.

Exports:
    ANALYTICS_ROLES: Staff roles allowed to see branch analytics.
    ANALYTICS_CAPABILITIES: Nine analytics capabilities.
"""

from __future__ import annotations

from src.dispatch.agents.analytics.schemas import PeriodParams, TrendParams
from src.dispatch.agents.base import AgentCapability
from src.dispatch.core.auth import EXECUTIVE_ROLES, StaffRole, UserType

ANALYTICS_ROLES: list[StaffRole] = [
    StaffRole.ADMIN,
    StaffRole.DIRECTOR,
    StaffRole.GENERAL_MANAGER,
    StaffRole.STORE_MANAGER,
]


def _staff_capability(
    action: str,
    description: str,
    roles: list[StaffRole],
    required: list[str] | None = None,
    optional: list[str] | None = None,
    schema=None,
) -> AgentCapability:
    return AgentCapability(
        action=action,
        description=description,
        required_params=required or [],
        optional_params=optional or [],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=roles,
        input_schema=schema,
    )


ANALYTICS_CAPABILITIES: list[AgentCapability] = [
    _staff_capability(
        "getRevenueAnalytics",
        "Get revenue breakdown by period, branch, and payment method",
        ANALYTICS_ROLES,
        required=["period"],
        optional=["branchId"],
        schema=PeriodParams,
    ),
    _staff_capability(
        "getOrderAnalytics",
        "Get order counts, status distribution, and turnaround metrics",
        ANALYTICS_ROLES,
        required=["period"],
        optional=["branchId"],
        schema=PeriodParams,
    ),
    _staff_capability(
        "getCustomerAnalytics",
        "Get top customers, retention metrics, and acquisition data",
        ANALYTICS_ROLES,
        required=["period"],
        optional=["limit"],
        schema=PeriodParams,
    ),
    _staff_capability(
        "getStaffPerformance",
        "Get individual staff performance metrics and rankings",
        ANALYTICS_ROLES,
        required=["staffId", "period"],
        optional=["branchId"],
        schema=PeriodParams,
    ),
    _staff_capability(
        "getBranchComparison",
        "Compare performance metrics across branches",
        EXECUTIVE_ROLES,
        required=["period"],
        optional=["branchIds"],
        schema=PeriodParams,
    ),
    _staff_capability(
        "getDriverAnalytics",
        "Get delivery statistics and driver efficiency metrics",
        ANALYTICS_ROLES,
        required=["period"],
        optional=["driverId", "branchId"],
        schema=PeriodParams,
    ),
    _staff_capability(
        "getTrendAnalysis",
        "Get period-over-period comparison with percentage changes",
        EXECUTIVE_ROLES,
        required=["metric", "period"],
        optional=["branchId"],
        schema=TrendParams,
    ),
    _staff_capability(
        "getNaturalLanguageQuery",
        "Process natural language business questions and return insights",
        EXECUTIVE_ROLES,
        required=["query"],
        optional=["branchId", "timeframe"],
    ),
    _staff_capability(
        "getDashboardSummary",
        "Get executive dashboard summary with key metrics",
        ANALYTICS_ROLES,
        optional=["branchId"],
    ),
]
