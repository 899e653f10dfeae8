"""Order Agent: order tracking, history and branch pipeline views.

Customers can only see their own orders. Staff may look up any order and,
with the right role, branch-wide pipeline and daily summaries.

Exports:
    OrderAgent: The order information specialist.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus, to_iso
from src.dispatch.agents.company import order_status_label
from src.dispatch.agents.order.capabilities import ORDER_CAPABILITIES
from src.dispatch.agents.repositories import OrderRepository
from src.dispatch.core.auth import AuthContext, UserType

ORDER_NOT_FOUND = "Order not found. Please check your order ID and try again."


class OrderAgent(BaseAgent):
    """Order information specialist.

    Args:
        order_repository: Source of order records.
    """

    name = "order-agent"
    description = (
        "Order information specialist - tracks orders, provides status updates, and order history"
    )
    capabilities = ORDER_CAPABILITIES

    def __init__(self, order_repository: OrderRepository) -> None:
        super().__init__()
        self._orders = order_repository

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "getOrderStatus": self._handle_order_status,
            "getOrderDetails": self._handle_order_details,
            "getOrderHistory": self._handle_order_history,
            "getLatestOrder": self._handle_latest_order,
            "getOrdersByStatus": self._handle_orders_by_status,
            "getPipelineStats": self._handle_pipeline_stats,
            "getTodaysSummary": self._handle_todays_summary,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")
        return await handler(params, auth)

    # ── Single Order ─────────────────────────────────────────────────────────

    async def _load_visible_order(
        self, order_id: str, auth: AuthContext
    ) -> tuple[dict | None, AgentResponse | None]:
        order = await self._orders.get_order(order_id)
        if order is None:
            return None, self.error_response(ResponseStatus.ERROR, ORDER_NOT_FOUND)
        if auth.user_type == UserType.CUSTOMER and order.get("customer_id") != auth.customer_id:
            return None, self.error_response(
                ResponseStatus.UNAUTHORIZED, "You do not have permission to view this order."
            )
        return order, None

    async def _handle_order_status(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        order, denial = await self._load_visible_order(str(params["orderId"]), auth)
        if denial is not None:
            return denial

        label = order_status_label(order["status"])
        estimated = order.get("estimated_completion")
        return self.success_response(
            data={
                "orderId": order["order_id"],
                "status": order["status"],
                "statusLabel": label,
                "estimatedCompletion": (
                    self.format_datetime(estimated) if estimated else "Not available"
                ),
                "garmentCount": len(order.get("garments") or []),
                "totalAmount": order.get("total_amount", 0),
                "paidAmount": order.get("paid_amount", 0),
                "paymentStatus": order.get("payment_status"),
            },
            message=f"Your order {order['order_id']} is currently: {label}",
        )

    async def _handle_order_details(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        order, denial = await self._load_visible_order(str(params["orderId"]), auth)
        if denial is not None:
            return denial

        details = summarize_order(order)
        details.update({
            "garments": [
                {
                    "garmentId": g.get("garment_id"),
                    "type": g.get("type"),
                    "color": g.get("color"),
                    "brand": g.get("brand"),
                    "services": g.get("services") or [],
                    "price": g.get("price", 0),
                    "status": g.get("status"),
                    "specialInstructions": g.get("special_instructions"),
                }
                for g in order.get("garments") or []
            ],
            "collectionMethod": order.get("collection_method"),
            "returnMethod": order.get("return_method"),
            "deliveryAddress": order.get("delivery_address"),
            "specialInstructions": order.get("special_instructions"),
        })
        return self.success_response(
            data=details,
            message=f"Details for order {order['order_id']}: {details['statusLabel']}",
        )

    # ── Customer History ─────────────────────────────────────────────────────

    async def _handle_order_history(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customer_id = self.scoped_customer_id(params, auth)
        if not customer_id:
            return self.error_response(
                ResponseStatus.ERROR,
                "Please specify a customer ID to view their order history.",
            )

        orders = await self._orders.list_by_customer(customer_id, int(params.get("limit") or 10))
        return self.success_response(
            data={
                "customerId": customer_id,
                "orders": [summarize_order(o) for o in orders],
                "totalOrders": len(orders),
            },
            message=f"Found {len(orders)} orders",
        )

    async def _handle_latest_order(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customer_id = self.scoped_customer_id(params, auth)
        if not customer_id:
            return self.error_response(ResponseStatus.ERROR, "Please specify a customer ID.")

        orders = await self._orders.list_by_customer(customer_id, 1)
        if not orders:
            return self.success_response(data=None, message="No orders found.")

        latest = summarize_order(orders[0])
        return self.success_response(
            data=latest,
            message=f"Your latest order ({latest['orderId']}) is: {latest['statusLabel']}",
        )

    # ── Staff Views ──────────────────────────────────────────────────────────

    async def _handle_orders_by_status(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        status = str(params["status"])
        limit = int(params.get("limit") or 50)
        branch_id = params.get("branchId") or auth.branch_id

        if branch_id:
            orders = [
                o for o in await self._orders.list_by_branch(branch_id, limit)
                if o.get("status") == status
            ]
        else:
            orders = await self._orders.list_by_status(status, limit)

        return self.success_response(
            data={
                "status": status,
                "statusLabel": order_status_label(status),
                "orders": [summarize_order(o) for o in orders],
                "count": len(orders),
            },
            message=f"Found {len(orders)} orders with status: {order_status_label(status)}",
        )

    async def _handle_pipeline_stats(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        branch_id = params.get("branchId") or auth.branch_id
        if not branch_id:
            return self.error_response(ResponseStatus.ERROR, "Branch ID is required.")

        stats = await self._orders.pipeline_stats(branch_id)
        total = stats.get("total", sum(v for v in stats.values() if isinstance(v, int)))
        summary = f"Total: {total} orders in pipeline"
        return self.success_response(
            data={"branchId": branch_id, "stats": stats, "summary": summary},
            message=summary,
        )

    async def _handle_todays_summary(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        branch_id = params.get("branchId") or auth.branch_id
        today = datetime.now(timezone.utc).date()

        if branch_id:
            count = await self._orders.today_count(branch_id)
            stats = await self._orders.pipeline_stats(branch_id)
            return self.success_response(
                data={
                    "date": today.isoformat(),
                    "branchId": branch_id,
                    "ordersToday": count,
                    "pipeline": stats,
                },
                message=f"{count} orders received today at {branch_id}",
            )

        todays = [
            o for o in await self._orders.list_recent(100)
            if o.get("created_at") is not None and o["created_at"].date() == today
        ]
        revenue = sum(o.get("paid_amount", 0) for o in todays)
        return self.success_response(
            data={
                "date": today.isoformat(),
                "totalOrders": len(todays),
                "totalGarments": sum(len(o.get("garments") or []) for o in todays),
                "totalRevenue": revenue,
                "formattedRevenue": self.format_currency(revenue),
            },
            message=f"{len(todays)} orders today, {self.format_currency(revenue)} collected",
        )


def summarize_order(order: dict[str, Any]) -> dict[str, Any]:
    estimated = order.get("estimated_completion")
    return {
        "orderId": order.get("order_id"),
        "status": order.get("status"),
        "statusLabel": order_status_label(order.get("status", "")),
        "totalAmount": order.get("total_amount", 0),
        "paidAmount": order.get("paid_amount", 0),
        "paymentStatus": order.get("payment_status"),
        "garmentCount": len(order.get("garments") or []),
        "estimatedCompletion": to_iso(estimated),
        "createdAt": to_iso(order.get("created_at")),
        "customerName": order.get("customer_name"),
        "branchId": order.get("branch_id"),
    }
