"""Logistics agent package.

Exports:
    LogisticsAgent: Pickup scheduling and dispatch specialist.
    LOGISTICS_CAPABILITIES: The logistics agent's capability list.
    SchedulePickupParams: Typed parameters for schedule_pickup.
"""

from src.dispatch.agents.logistics.agent import LogisticsAgent
from src.dispatch.agents.logistics.capabilities import LOGISTICS_CAPABILITIES
from src.dispatch.agents.logistics.schemas import SchedulePickupParams

__all__ = ["LogisticsAgent", "LOGISTICS_CAPABILITIES", "SchedulePickupParams"]
