"""Pricing Agent: service prices, quotes, promotions and comparisons.

Exports:
    PricingAgent: The pricing and services specialist.
    PROMOTIONS: The standing promotions offered at every branch.
"""

from __future__ import annotations

from typing import Any

from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus
from src.dispatch.agents.company import COMPANY_INFO
from src.dispatch.agents.pricing.capabilities import PRICING_CAPABILITIES
from src.dispatch.agents.pricing.catalog import StaticPricingRepository
from src.dispatch.agents.repositories import PricingRepository
from src.dispatch.config import get_settings
from src.dispatch.core.auth import AuthContext

EXPRESS_NOTE = "Express service (2-hour turnaround) available at no extra cost!"

PROMOTIONS: list[dict[str, Any]] = [
    {
        "id": "express-free",
        "title": "FREE Express Service",
        "description": "Get your clothes back in just 2 hours at no extra cost!",
        "validUntil": None,
        "terms": "Available at all branches during operating hours",
    },
    {
        "id": "free-delivery",
        "title": "FREE Pickup & Delivery",
        "description": "We come to you! Free pickup and delivery across Nairobi.",
        "validUntil": None,
        "terms": "Minimum order value may apply",
    },
    {
        "id": "first-order",
        "title": "Welcome Offer",
        "description": "New customers enjoy 10% off their first order!",
        "validUntil": None,
        "terms": "Valid for first-time customers only",
    },
]

# (option label, services) in display order for comparePrices.
COMPARISON_OPTIONS: list[tuple[str, list[str]]] = [
    ("Wash Only", ["wash"]),
    ("Dry Clean Only", ["dryclean"]),
    ("Wash + Iron", ["wash", "iron"]),
    ("Dry Clean + Iron", ["dryclean", "iron"]),
    ("Wash + Iron + Starch", ["wash", "iron", "starch"]),
]

# Requested service name -> key in a pricing record's services.
_SERVICE_KEYS = {
    "wash": "wash",
    "dryclean": "dry_clean",
    "dry clean": "dry_clean",
    "dry_clean": "dry_clean",
    "iron": "iron",
    "starch": "starch",
}


def price_for_services(pricing: dict[str, Any], services: list[str]) -> int:
    """Sum the unit price of the requested services.

    Unknown service names add nothing; "express" is free.
    """
    rates = pricing.get("services") or {}
    total = 0.0
    for service in services:
        key = _SERVICE_KEYS.get(service.strip().lower())
        if key is not None:
            total += rates.get(key, 0)
    return round(total)


class PricingAgent(BaseAgent):
    """Pricing and services specialist.

    Args:
        pricing_repository: Source of per-branch price lists. Defaults to
            the built-in standard price list.
        default_branch_id: Branch used when a request names none. Defaults
            to the DEFAULT_BRANCH_ID setting.
    """

    name = "pricing-agent"
    description = "Pricing and services specialist - provides service prices, quotes, and promotions"
    capabilities = PRICING_CAPABILITIES

    def __init__(
        self,
        pricing_repository: PricingRepository | None = None,
        default_branch_id: str | None = None,
    ) -> None:
        super().__init__()
        self._pricing = (
            pricing_repository if pricing_repository is not None else StaticPricingRepository()
        )
        self._default_branch_id = default_branch_id or get_settings().DEFAULT_BRANCH_ID

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "getServicePricing": self._handle_service_pricing,
            "getGarmentPrice": self._handle_garment_price,
            "getQuote": self._handle_quote,
            "getPromotions": self._handle_promotions,
            "comparePrices": self._handle_compare_prices,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")
        return await handler(params)

    def _branch(self, params: dict[str, Any]) -> str:
        return params.get("branchId") or self._default_branch_id

    async def _handle_service_pricing(self, params: dict[str, Any]) -> AgentResponse:
        branch_id = self._branch(params)
        pricing = await self._pricing.list_for_branch(branch_id)

        if not pricing:
            return self.success_response(
                data={
                    "branchId": branch_id,
                    "note": "Pricing varies by garment type. Contact us for a detailed quote.",
                    "expressService": COMPANY_INFO["expressService"],
                    "pickupDelivery": COMPANY_INFO["pickupDelivery"],
                    "contact": COMPANY_INFO["phone"],
                },
                message="Contact us for detailed pricing information.",
            )

        pricing_list = [pricing_info(p) for p in pricing]
        return self.success_response(
            data={
                "branchId": branch_id,
                "pricing": pricing_list,
                "expressService": COMPANY_INFO["expressService"],
                "pickupDelivery": COMPANY_INFO["pickupDelivery"],
                "note": "Express service (2-hour turnaround) and pickup/delivery are FREE!",
            },
            message=f"Pricing information for {len(pricing_list)} garment types",
        )

    async def _handle_garment_price(self, params: dict[str, Any]) -> AgentResponse:
        garment_type = str(params["garmentType"])
        pricing = await self._pricing.get_for_garment(self._branch(params), garment_type)

        if pricing is None:
            return self.success_response(
                data={
                    "garmentType": garment_type,
                    "available": False,
                    "message": (
                        f'We don\'t have standard pricing for "{garment_type}". '
                        "Please contact us for a custom quote."
                    ),
                    "contact": COMPANY_INFO["phone"],
                },
                message=f"Contact us for pricing on {garment_type}",
            )

        info = pricing_info(pricing)
        rates = info["services"]
        return self.success_response(
            data={**info, "available": True, "expressService": "FREE (2-hour turnaround)"},
            message=(
                f"{garment_type} pricing: Wash {self.format_currency(rates['wash'])}, "
                f"Dry Clean {self.format_currency(rates['dryClean'])}"
            ),
        )

    async def _handle_quote(self, params: dict[str, Any]) -> AgentResponse:
        items = params["items"]
        if not items:
            return self.error_response(ResponseStatus.ERROR, "Please specify items for the quote.")

        branch_id = self._branch(params)
        quote_items = []
        unavailable_types: list[str] = []
        grand_total = 0

        for item in items:
            pricing = await self._pricing.get_for_garment(branch_id, item["type"])
            if pricing is None:
                unavailable_types.append(item["type"])
                continue
            unit_price = price_for_services(pricing, item["services"])
            total_price = unit_price * item["quantity"]
            grand_total += total_price
            quote_items.append({
                "type": item["type"],
                "services": item["services"],
                "quantity": item["quantity"],
                "unitPrice": unit_price,
                "totalPrice": total_price,
                "unitPriceFormatted": self.format_currency(unit_price),
                "totalPriceFormatted": self.format_currency(total_price),
            })

        if unavailable_types:
            message = (
                f"Quote calculated. Note: {', '.join(unavailable_types)} require custom pricing."
            )
        else:
            message = f"Total quote: {self.format_currency(grand_total)}"

        return self.success_response(
            data={
                "branchId": branch_id,
                "items": quote_items,
                "unavailableTypes": unavailable_types,
                "grandTotal": grand_total,
                "grandTotalFormatted": self.format_currency(grand_total),
                "expressAvailable": True,
                "expressNote": EXPRESS_NOTE,
                "pickupDelivery": "FREE",
            },
            message=message,
        )

    async def _handle_promotions(self, params: dict[str, Any]) -> AgentResponse:
        return self.success_response(
            data={
                "promotions": PROMOTIONS,
                "count": len(PROMOTIONS),
                "contact": COMPANY_INFO["phone"],
                "whatsapp": COMPANY_INFO["whatsapp"],
            },
            message=f"We have {len(PROMOTIONS)} active promotions available!",
        )

    async def _handle_compare_prices(self, params: dict[str, Any]) -> AgentResponse:
        garment_type = str(params["garmentType"])
        pricing = await self._pricing.get_for_garment(self._branch(params), garment_type)

        if pricing is None:
            return self.success_response(
                data={
                    "garmentType": garment_type,
                    "available": False,
                    "message": (
                        f'Pricing comparison not available for "{garment_type}". '
                        "Please contact us."
                    ),
                    "contact": COMPANY_INFO["phone"],
                },
            )

        comparisons = []
        for option, services in COMPARISON_OPTIONS:
            price = price_for_services(pricing, services)
            # Options priced at zero are not offered for this garment.
            if price > 0:
                comparisons.append({
                    "option": option,
                    "services": services,
                    "price": price,
                    "priceFormatted": self.format_currency(price),
                })

        return self.success_response(
            data={
                "garmentType": garment_type,
                "comparisons": comparisons,
                "recommendation": "Most customers choose Wash + Iron for everyday garments.",
                "expressNote": "All options available with FREE express service (2-hour turnaround)!",
            },
            message=f"Price comparison for {garment_type}",
        )


def pricing_info(pricing: dict[str, Any]) -> dict[str, Any]:
    rates = pricing.get("services") or {}
    return {
        "garmentType": pricing.get("garment_type"),
        "services": {
            "wash": rates.get("wash", 0),
            "dryClean": rates.get("dry_clean", 0),
            "iron": rates.get("iron", 0),
            "starch": rates.get("starch", 0),
        },
    }
