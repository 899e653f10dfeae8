"""Customer Agent: profiles, spending and customer insights.

Exports:
    CustomerAgent: The customer data specialist.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any

from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus, to_iso
from src.dispatch.agents.company import COMPLETED_ORDER_STATUSES
from src.dispatch.agents.customer.capabilities import CUSTOMER_CAPABILITIES
from src.dispatch.agents.repositories import CustomerRepository, OrderRepository
from src.dispatch.core.auth import AuthContext

CUSTOMER_NOT_FOUND = "Customer not found."


class CustomerAgent(BaseAgent):
    """Customer data specialist.

    Args:
        customer_repository: Source of customer records.
        order_repository: Source of the customers' orders.
    """

    name = "customer-agent"
    description = (
        "Customer data specialist - manages profiles, order summaries, and customer insights"
    )
    capabilities = CUSTOMER_CAPABILITIES

    def __init__(
        self,
        customer_repository: CustomerRepository,
        order_repository: OrderRepository,
    ) -> None:
        super().__init__()
        self._customers = customer_repository
        self._orders = order_repository

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "getProfile": self._handle_profile,
            "getOrderSummary": self._handle_order_summary,
            "getSpendHistory": self._handle_spend_history,
            "searchCustomer": self._handle_search,
            "getTopCustomers": self._handle_top_customers,
            "getRecentCustomers": self._handle_recent_customers,
            "getCustomerInsights": self._handle_insights,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")
        return await handler(params, auth)

    async def _load_scoped_customer(
        self, params: dict[str, Any], auth: AuthContext
    ) -> tuple[dict | None, AgentResponse | None]:
        customer_id = self.scoped_customer_id(params, auth)
        if not customer_id:
            return None, self.error_response(ResponseStatus.ERROR, "Please specify a customer ID.")
        customer = await self._customers.get_customer(customer_id)
        if customer is None:
            return None, self.error_response(ResponseStatus.ERROR, CUSTOMER_NOT_FOUND)
        return customer, None

    # ── Customer Self-Service ────────────────────────────────────────────────

    async def _handle_profile(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        customer, denial = await self._load_scoped_customer(params, auth)
        if denial is not None:
            return denial

        profile = summarize_customer(customer)
        profile["addresses"] = customer.get("addresses") or []
        profile["preferences"] = customer.get("preferences") or {}
        return self.success_response(data=profile, message=f"Profile for {customer['name']}")

    async def _handle_order_summary(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customer, denial = await self._load_scoped_customer(params, auth)
        if denial is not None:
            return denial

        customer_id = customer["customer_id"]
        orders = await self._orders.list_by_customer(customer_id, 50)
        completed = [o for o in orders if o.get("status") in COMPLETED_ORDER_STATUSES]
        order_count = customer.get("order_count", 0)
        total_spent = customer.get("total_spent", 0)

        return self.success_response(
            data={
                "customerId": customer_id,
                "customerName": customer["name"],
                "totalOrders": order_count,
                "totalSpent": total_spent,
                "formattedSpent": self.format_currency(total_spent),
                "completedOrders": len(completed),
                "pendingOrders": len(orders) - len(completed),
                "totalGarments": sum(len(o.get("garments") or []) for o in orders),
                "averageOrderValue": round(total_spent / order_count) if order_count else 0,
                "recentOrders": [
                    {
                        "orderId": o.get("order_id"),
                        "status": o.get("status"),
                        "totalAmount": o.get("total_amount", 0),
                        "createdAt": to_iso(o.get("created_at")),
                    }
                    for o in orders[:5]
                ],
            },
            message=(
                f"{customer['name']} has {order_count} orders totaling "
                f"{self.format_currency(total_spent)}"
            ),
        )

    async def _handle_spend_history(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customer, denial = await self._load_scoped_customer(params, auth)
        if denial is not None:
            return denial

        orders = await self._orders.list_by_customer(customer["customer_id"], 100)
        monthly: dict[str, float] = {}
        for order in orders:
            created = order.get("created_at")
            if created is None:
                continue
            month = f"{created:%Y-%m}"
            monthly[month] = monthly.get(month, 0) + order.get("paid_amount", 0)

        months = sorted(monthly.items(), reverse=True)[:12]
        total_spent = customer.get("total_spent", 0)
        return self.success_response(
            data={
                "customerId": customer["customer_id"],
                "customerName": customer["name"],
                "totalSpent": total_spent,
                "formattedTotal": self.format_currency(total_spent),
                "orderCount": customer.get("order_count", 0),
                "monthlySpend": [
                    {"month": month, "amount": amount, "formatted": self.format_currency(amount)}
                    for month, amount in months
                ],
                "memberSince": to_iso(customer.get("created_at")),
            },
        )

    # ── Staff Views ──────────────────────────────────────────────────────────

    async def _handle_search(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        query = str(params["query"])
        customers = await self._customers.search(query, int(params.get("limit") or 10))
        return self.success_response(
            data={
                "query": query,
                "results": [summarize_customer(c) for c in customers],
                "count": len(customers),
            },
            message=f'Found {len(customers)} customers matching "{query}"',
        )

    async def _handle_top_customers(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customers = await self._customers.top_customers(int(params.get("limit") or 10))
        return self.success_response(
            data={
                "customers": [
                    {
                        **summarize_customer(c),
                        "formattedSpent": self.format_currency(c.get("total_spent", 0)),
                    }
                    for c in customers
                ],
                "count": len(customers),
            },
            message=f"Top {len(customers)} customers by spending",
        )

    async def _handle_recent_customers(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customers = await self._customers.recent_customers(int(params.get("limit") or 10))
        return self.success_response(
            data={
                "customers": [
                    {
                        **summarize_customer(c),
                        "joinedDate": (
                            self.format_date(c["created_at"]) if c.get("created_at") else None
                        ),
                    }
                    for c in customers
                ],
                "count": len(customers),
            },
            message=f"{len(customers)} recently registered customers",
        )

    async def _handle_insights(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        customer_id = str(params["customerId"])
        customer = await self._customers.get_customer(customer_id)
        if customer is None:
            return self.error_response(ResponseStatus.ERROR, CUSTOMER_NOT_FOUND)

        orders = await self._orders.list_by_customer(customer_id, 100)
        cutoff = datetime.now(timezone.utc) - timedelta(days=30)
        recent = [o for o in orders if o.get("created_at") and o["created_at"] >= cutoff]

        garment_types: Counter[str] = Counter()
        services: Counter[str] = Counter()
        for order in orders:
            for garment in order.get("garments") or []:
                garment_types[garment.get("type")] += 1
                services.update(garment.get("services") or [])

        # Orders are newest first, so the span runs from the last to the first.
        avg_days_between = 0
        dated = [o["created_at"] for o in orders if o.get("created_at")]
        if len(dated) > 1:
            span_days = (dated[0] - dated[-1]).total_seconds() / 86400
            avg_days_between = round(span_days / (len(dated) - 1))

        return self.success_response(
            data={
                "customerId": customer_id,
                "customerName": customer["name"],
                "phone": customer.get("phone"),
                "email": customer.get("email"),
                "memberSince": (
                    self.format_date(customer["created_at"]) if customer.get("created_at") else None
                ),
                "lifetimeValue": self.format_currency(customer.get("total_spent", 0)),
                "totalOrders": customer.get("order_count", 0),
                "recentActivity": {
                    "ordersLast30Days": len(recent),
                    "spentLast30Days": self.format_currency(
                        sum(o.get("paid_amount", 0) for o in recent)
                    ),
                },
                "preferences": {
                    "topGarmentTypes": [
                        {"type": t, "count": n} for t, n in garment_types.most_common(5)
                    ],
                    "topServices": [
                        {"service": s, "count": n} for s, n in services.most_common(5)
                    ],
                },
                "engagement": {
                    "avgDaysBetweenOrders": avg_days_between,
                    "lastOrderDate": self.format_date(dated[0]) if dated else "Never",
                },
            },
        )


def summarize_customer(customer: dict[str, Any]) -> dict[str, Any]:
    return {
        "customerId": customer.get("customer_id"),
        "name": customer.get("name"),
        "phone": customer.get("phone"),
        "email": customer.get("email"),
        "orderCount": customer.get("order_count", 0),
        "totalSpent": customer.get("total_spent", 0),
        "memberSince": to_iso(customer.get("created_at")),
    }
