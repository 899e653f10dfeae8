"""Tests for the OrderAgent.

The order repository is an AsyncMock; records use the snake_case shapes the
repositories return.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dispatch.agents.base import AgentRequest, AgentResponse, ResponseStatus
from src.dispatch.agents.order import OrderAgent
from src.dispatch.agents.order.agent import ORDER_NOT_FOUND, summarize_order
from src.dispatch.core.auth import AuthContext


# ── Helpers ──────────────────────────────────────────────────────────────────


def _order(order_id: str = "ORD-MAIN-20250106-0001", **overrides: Any) -> dict[str, Any]:
    order = {
        "order_id": order_id,
        "customer_id": "CUST-001",
        "customer_name": "Wanjiku Kamau",
        "branch_id": "KILIMANI",
        "status": "washing",
        "total_amount": 1500,
        "paid_amount": 1000,
        "payment_status": "partial",
        "garments": [
            {"garment_id": "G1", "type": "Shirt", "color": "white", "services": ["wash", "iron"], "price": 300},
            {"garment_id": "G2", "type": "Suit", "color": "navy", "services": ["dry_clean"], "price": 1200},
        ],
        "estimated_completion": datetime(2025, 1, 8, 14, 0, tzinfo=timezone.utc),
        "created_at": datetime.now(timezone.utc),
    }
    order.update(overrides)
    return order


def _repo(**methods: Any) -> MagicMock:
    repo = MagicMock()
    repo.get_order = AsyncMock(return_value=methods.get("get_order"))
    repo.list_by_customer = AsyncMock(return_value=methods.get("list_by_customer", []))
    repo.list_by_branch = AsyncMock(return_value=methods.get("list_by_branch", []))
    repo.list_by_status = AsyncMock(return_value=methods.get("list_by_status", []))
    repo.list_recent = AsyncMock(return_value=methods.get("list_recent", []))
    repo.pipeline_stats = AsyncMock(return_value=methods.get("pipeline_stats", {}))
    repo.today_count = AsyncMock(return_value=methods.get("today_count", 0))
    return repo


async def _call(agent: OrderAgent, action: str, auth: AuthContext, **params: Any) -> AgentResponse:
    return await agent.process_request(
        AgentRequest(request_id="req_1", to_agent="order-agent", action=action, params=params, auth=auth)
    )


# ── Order Status ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_order_status_for_owner(customer_auth):
    agent = OrderAgent(_repo(get_order=_order()))
    response = await _call(agent, "getOrderStatus", customer_auth, orderId="ORD-MAIN-20250106-0001")

    assert response.ok
    assert response.data["statusLabel"] == "Being Washed"
    assert response.data["garmentCount"] == 2
    assert response.data["estimatedCompletion"] == "Wed, 8 Jan 2025 at 14:00"
    assert response.message == "Your order ORD-MAIN-20250106-0001 is currently: Being Washed"


@pytest.mark.asyncio
async def test_order_status_other_customers_order(customer_auth):
    """Customers cannot see someone else's order."""
    agent = OrderAgent(_repo(get_order=_order(customer_id="CUST-999")))
    response = await _call(agent, "getOrderStatus", customer_auth, orderId="ORD-X")
    assert response.status == ResponseStatus.UNAUTHORIZED
    assert response.error == "You do not have permission to view this order."


@pytest.mark.asyncio
async def test_order_status_staff_sees_any_order(front_desk_auth):
    agent = OrderAgent(_repo(get_order=_order(customer_id="CUST-999", estimated_completion=None)))
    response = await _call(agent, "getOrderStatus", front_desk_auth, orderId="ORD-X")
    assert response.ok
    assert response.data["estimatedCompletion"] == "Not available"


@pytest.mark.asyncio
async def test_order_not_found(customer_auth):
    agent = OrderAgent(_repo(get_order=None))
    response = await _call(agent, "getOrderStatus", customer_auth, orderId="ORD-NOPE")
    assert response.status == ResponseStatus.ERROR
    assert response.error == ORDER_NOT_FOUND


@pytest.mark.asyncio
async def test_order_status_requires_login(guest_auth):
    repo = _repo(get_order=_order())
    agent = OrderAgent(repo)
    response = await _call(agent, "getOrderStatus", guest_auth, orderId="ORD-1")
    assert response.status == ResponseStatus.UNAUTHORIZED
    repo.get_order.assert_not_awaited()


@pytest.mark.asyncio
async def test_order_details_lists_garments(customer_auth):
    agent = OrderAgent(_repo(get_order=_order(special_instructions="No starch")))
    response = await _call(agent, "getOrderDetails", customer_auth, orderId="ORD-1")
    assert response.ok
    assert [g["garmentId"] for g in response.data["garments"]] == ["G1", "G2"]
    assert response.data["specialInstructions"] == "No starch"
    assert response.data["customerName"] == "Wanjiku Kamau"


# ── History ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_order_history_customer_scoped_to_self(customer_auth):
    """A customer asking about another id still sees only their own orders."""
    repo = _repo(list_by_customer=[_order(), _order("ORD-2")])
    agent = OrderAgent(repo)
    response = await _call(agent, "getOrderHistory", customer_auth, customerId="CUST-999", limit=5)

    repo.list_by_customer.assert_awaited_once_with("CUST-001", 5)
    assert response.data["totalOrders"] == 2
    assert response.message == "Found 2 orders"


@pytest.mark.asyncio
async def test_order_history_staff_needs_customer(front_desk_auth):
    response = await _call(OrderAgent(_repo()), "getOrderHistory", front_desk_auth)
    assert response.status == ResponseStatus.ERROR


@pytest.mark.asyncio
async def test_latest_order_none(customer_auth):
    response = await _call(OrderAgent(_repo()), "getLatestOrder", customer_auth)
    assert response.ok
    assert response.data is None
    assert response.message == "No orders found."


@pytest.mark.asyncio
async def test_latest_order(customer_auth):
    repo = _repo(list_by_customer=[_order(status="ready")])
    response = await _call(OrderAgent(repo), "getLatestOrder", customer_auth)
    repo.list_by_customer.assert_awaited_once_with("CUST-001", 1)
    assert response.data["statusLabel"] == "Ready for Collection"


# ── Staff Views ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_orders_by_status_is_staff_only(customer_auth):
    response = await _call(OrderAgent(_repo()), "getOrdersByStatus", customer_auth, status="ready")
    assert response.status == ResponseStatus.UNAUTHORIZED


@pytest.mark.asyncio
async def test_orders_by_status_filters_branch(front_desk_auth):
    """With a branch in scope, branch orders are filtered by status."""
    repo = _repo(list_by_branch=[_order(status="ready"), _order("ORD-2", status="washing")])
    response = await _call(OrderAgent(repo), "getOrdersByStatus", front_desk_auth, status="ready")
    repo.list_by_branch.assert_awaited_once_with("KILIMANI", 50)
    assert response.data["count"] == 1
    assert response.data["statusLabel"] == "Ready for Collection"


@pytest.mark.asyncio
async def test_pipeline_stats(front_desk_auth):
    repo = _repo(pipeline_stats={"washing": 3, "ready": 2, "total": 5})
    response = await _call(OrderAgent(repo), "getPipelineStats", front_desk_auth)
    assert response.data["summary"] == "Total: 5 orders in pipeline"


@pytest.mark.asyncio
async def test_todays_summary_management_only(front_desk_auth):
    response = await _call(OrderAgent(_repo()), "getTodaysSummary", front_desk_auth)
    assert response.status == ResponseStatus.UNAUTHORIZED


@pytest.mark.asyncio
async def test_todays_summary_for_branch(store_manager_auth):
    repo = _repo(today_count=7, pipeline_stats={"total": 12})
    response = await _call(OrderAgent(repo), "getTodaysSummary", store_manager_auth)
    assert response.data["ordersToday"] == 7
    assert response.message == "7 orders received today at KILIMANI"


@pytest.mark.asyncio
async def test_todays_summary_all_branches(admin_auth):
    """Without a branch, recent orders created today are totalled."""
    admin = admin_auth.model_copy(update={"branch_id": None})
    repo = _repo(list_recent=[_order(paid_amount=1000), _order("ORD-2", paid_amount=250)])
    response = await _call(OrderAgent(repo), "getTodaysSummary", admin)
    assert response.data["totalOrders"] == 2
    assert response.data["formattedRevenue"] == "KES 1,250"


def test_summarize_order():
    summary = summarize_order(_order())
    assert summary["orderId"] == "ORD-MAIN-20250106-0001"
    assert summary["estimatedCompletion"] == "2025-01-08T14:00:00+00:00"
