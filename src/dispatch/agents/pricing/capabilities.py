"""Agent capability declarations for the pricing agent.

Every pricing action is public so guests can ask about prices before
signing up.
"""

from __future__ import annotations

from src.dispatch.agents.base import AgentCapability
from src.dispatch.agents.pricing.schemas import QuoteParams

PRICING_CAPABILITIES: list[AgentCapability] = [
    AgentCapability(
        action="getServicePricing",
        description="Get pricing for all services",
        optional_params=["branchId"],
    ),
    AgentCapability(
        action="getGarmentPrice",
        description="Get price for a specific garment type",
        required_params=["garmentType"],
        optional_params=["branchId"],
    ),
    AgentCapability(
        action="getQuote",
        description="Get a price quote for multiple garments",
        required_params=["items"],
        optional_params=["branchId"],
        input_schema=QuoteParams,
    ),
    AgentCapability(
        action="getPromotions",
        description="Get current promotions and special offers",
    ),
    AgentCapability(
        action="comparePrices",
        description="Compare prices for different service options",
        required_params=["garmentType"],
        optional_params=["branchId"],
    ),
]
