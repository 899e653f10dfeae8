"""Pricing agent package.

Exports:
    PricingAgent: Prices, quotes and promotions specialist.
    PRICING_CAPABILITIES: The pricing agent's capability list.
    QuoteParams: Typed parameters for getQuote.
    StaticPricingRepository: Built-in price list.
"""

from src.dispatch.agents.pricing.agent import PricingAgent
from src.dispatch.agents.pricing.capabilities import PRICING_CAPABILITIES
from src.dispatch.agents.pricing.catalog import StaticPricingRepository
from src.dispatch.agents.pricing.schemas import QuoteParams

__all__ = [
    "PricingAgent",
    "PRICING_CAPABILITIES",
    "QuoteParams",
    "StaticPricingRepository",
]
