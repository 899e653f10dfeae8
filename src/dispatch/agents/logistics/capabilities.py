"""Agent capability declarations for the logistics agent.

Exports:
    LOGISTICS_CAPABILITIES: Customer, dispatcher and driver pickup actions.
"""

from __future__ import annotations

from src.dispatch.agents.base import AgentCapability
from src.dispatch.agents.logistics.schemas import SchedulePickupParams
from src.dispatch.core.auth import MANAGEMENT_ROLES, StaffRole, UserType

DISPATCH_ROLES: list[StaffRole] = [*MANAGEMENT_ROLES, StaffRole.FRONT_DESK]
STATUS_UPDATE_ROLES: list[StaffRole] = [*MANAGEMENT_ROLES, StaffRole.DRIVER]

LOGISTICS_CAPABILITIES: list[AgentCapability] = [
    # Customer
    AgentCapability(
        action="schedule_pickup",
        description="Schedule a new pickup request",
        required_params=[
            "serviceTypes",
            "itemDescription",
            "pickupAddress",
            "preferredDate",
            "timeSlot",
        ],
        optional_params=["expressService", "specialInstructions"],
        requires_auth=True,
        allowed_user_types=[UserType.CUSTOMER],
        input_schema=SchedulePickupParams,
    ),
    AgentCapability(
        action="get_available_slots",
        description="Get available pickup time slots for a date",
        required_params=["date"],
    ),
    AgentCapability(
        action="get_my_pickups",
        description="Get customer pickup requests",
        optional_params=["limit"],
        requires_auth=True,
        allowed_user_types=[UserType.CUSTOMER],
    ),
    AgentCapability(
        action="get_pickup_status",
        description="Get status of a pickup request",
        required_params=["requestId"],
        requires_auth=True,
        allowed_user_types=[UserType.CUSTOMER, UserType.STAFF],
    ),
    AgentCapability(
        action="cancel_pickup",
        description="Cancel a pickup request",
        required_params=["requestId"],
        optional_params=["reason"],
        requires_auth=True,
        allowed_user_types=[UserType.CUSTOMER, UserType.STAFF],
    ),
    # Dispatch
    AgentCapability(
        action="get_pending_pickups",
        description="Get all pending pickup requests",
        optional_params=["limit"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=DISPATCH_ROLES,
    ),
    AgentCapability(
        action="confirm_pickup",
        description="Confirm a pickup request",
        required_params=["requestId"],
        optional_params=["confirmedTime"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=DISPATCH_ROLES,
    ),
    AgentCapability(
        action="assign_driver",
        description="Assign a driver to a pickup",
        required_params=["requestId", "driverId", "driverName"],
        optional_params=["confirmedTime"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=MANAGEMENT_ROLES,
    ),
    AgentCapability(
        action="update_pickup_status",
        description="Update pickup request status",
        required_params=["requestId", "status"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=STATUS_UPDATE_ROLES,
    ),
    AgentCapability(
        action="convert_to_order",
        description="Convert pickup request to order",
        required_params=["requestId", "orderId"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=DISPATCH_ROLES,
    ),
    # Driver
    AgentCapability(
        action="get_my_assigned_pickups",
        description="Get pickups assigned to current driver",
        optional_params=["date"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=[StaffRole.DRIVER],
    ),
    AgentCapability(
        action="mark_picked_up",
        description="Mark a pickup as completed",
        required_params=["requestId"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=[StaffRole.DRIVER],
    ),
    AgentCapability(
        action="mark_at_facility",
        description="Mark pickup as arrived at facility",
        required_params=["requestId"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=[StaffRole.DRIVER, StaffRole.FRONT_DESK],
    ),
    # Reporting
    AgentCapability(
        action="get_pickup_stats",
        description="Get pickup request statistics",
        required_params=["startDate", "endDate"],
        requires_auth=True,
        allowed_user_types=[UserType.STAFF],
        allowed_staff_roles=MANAGEMENT_ROLES,
    ),
]
