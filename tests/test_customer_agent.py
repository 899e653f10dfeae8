"""Tests for the CustomerAgent."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dispatch.agents.base import AgentRequest, AgentResponse, ResponseStatus
from src.dispatch.agents.customer import CustomerAgent
from src.dispatch.agents.customer.agent import CUSTOMER_NOT_FOUND
from src.dispatch.core.auth import AuthContext


# ── Helpers ──────────────────────────────────────────────────────────────────


def _customer(**overrides: Any) -> dict[str, Any]:
    customer = {
        "customer_id": "CUST-001",
        "name": "Wanjiku Kamau",
        "phone": "+254712345678",
        "email": "wanjiku@example.com",
        "order_count": 4,
        "total_spent": 6000,
        "created_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
        "addresses": [{"label": "Home", "address": "Kilimani"}],
    }
    customer.update(overrides)
    return customer


def _order(order_id: str, days_ago: int, status: str = "delivered", paid: int = 1500) -> dict[str, Any]:
    return {
        "order_id": order_id,
        "status": status,
        "total_amount": paid,
        "paid_amount": paid,
        "garments": [{"type": "Shirt", "services": ["wash", "iron"]}],
        "created_at": datetime.now(timezone.utc) - timedelta(days=days_ago),
    }


def _make_agent(customer: dict | None = None, orders: list[dict] | None = None) -> tuple[CustomerAgent, MagicMock, MagicMock]:
    customers = MagicMock()
    customers.get_customer = AsyncMock(return_value=customer)
    customers.search = AsyncMock(return_value=[customer] if customer else [])
    customers.top_customers = AsyncMock(return_value=[customer] if customer else [])
    customers.recent_customers = AsyncMock(return_value=[customer] if customer else [])
    order_repo = MagicMock()
    order_repo.list_by_customer = AsyncMock(return_value=orders or [])
    return CustomerAgent(customers, order_repo), customers, order_repo


async def _call(agent: CustomerAgent, action: str, auth: AuthContext, **params: Any) -> AgentResponse:
    return await agent.process_request(
        AgentRequest(request_id="req_1", to_agent="customer-agent", action=action, params=params, auth=auth)
    )


# ── Self-Service ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_profile_scoped_to_customer(customer_auth):
    """Customers always load their own profile whatever id they pass."""
    agent, customers, _ = _make_agent(_customer())
    response = await _call(agent, "getProfile", customer_auth, customerId="CUST-999")

    customers.get_customer.assert_awaited_once_with("CUST-001")
    assert response.ok
    assert response.data["name"] == "Wanjiku Kamau"
    assert response.data["addresses"] == [{"label": "Home", "address": "Kilimani"}]
    assert response.data["preferences"] == {}


@pytest.mark.asyncio
async def test_profile_not_found(front_desk_auth):
    agent, _, _ = _make_agent(None)
    response = await _call(agent, "getProfile", front_desk_auth, customerId="CUST-404")
    assert response.status == ResponseStatus.ERROR
    assert response.error == CUSTOMER_NOT_FOUND


@pytest.mark.asyncio
async def test_profile_requires_login(guest_auth):
    agent, _, _ = _make_agent(_customer())
    response = await _call(agent, "getProfile", guest_auth)
    assert response.status == ResponseStatus.UNAUTHORIZED


@pytest.mark.asyncio
async def test_order_summary(customer_auth):
    orders = [_order("ORD-3", 1, status="washing"), _order("ORD-2", 10), _order("ORD-1", 40)]
    agent, _, _ = _make_agent(_customer(), orders)
    response = await _call(agent, "getOrderSummary", customer_auth)

    data = response.data
    assert data["completedOrders"] == 2
    assert data["pendingOrders"] == 1
    assert data["averageOrderValue"] == 1500
    assert data["formattedSpent"] == "KES 6,000"
    assert [o["orderId"] for o in data["recentOrders"]] == ["ORD-3", "ORD-2", "ORD-1"]


@pytest.mark.asyncio
async def test_spend_history_groups_by_month(customer_auth):
    orders = [
        {"paid_amount": 500, "created_at": datetime(2025, 2, 10, tzinfo=timezone.utc)},
        {"paid_amount": 700, "created_at": datetime(2025, 2, 1, tzinfo=timezone.utc)},
        {"paid_amount": 300, "created_at": datetime(2025, 1, 15, tzinfo=timezone.utc)},
    ]
    agent, _, _ = _make_agent(_customer(), orders)
    response = await _call(agent, "getSpendHistory", customer_auth)
    assert response.data["monthlySpend"] == [
        {"month": "2025-02", "amount": 1200, "formatted": "KES 1,200"},
        {"month": "2025-01", "amount": 300, "formatted": "KES 300"},
    ]


# ── Staff Views ──────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_search_is_staff_only(customer_auth, front_desk_auth):
    agent, customers, _ = _make_agent(_customer())
    denied = await _call(agent, "searchCustomer", customer_auth, query="Wanjiku")
    assert denied.status == ResponseStatus.UNAUTHORIZED

    found = await _call(agent, "searchCustomer", front_desk_auth, query="Wanjiku")
    customers.search.assert_awaited_once_with("Wanjiku", 10)
    assert found.message == 'Found 1 customers matching "Wanjiku"'


@pytest.mark.asyncio
async def test_top_customers_management_only(front_desk_auth, store_manager_auth):
    agent, _, _ = _make_agent(_customer())
    assert (await _call(agent, "getTopCustomers", front_desk_auth)).status == ResponseStatus.UNAUTHORIZED

    response = await _call(agent, "getTopCustomers", store_manager_auth, limit=3)
    assert response.data["customers"][0]["formattedSpent"] == "KES 6,000"


@pytest.mark.asyncio
async def test_recent_customers_joined_date(front_desk_auth):
    agent, _, _ = _make_agent(_customer())
    response = await _call(agent, "getRecentCustomers", front_desk_auth)
    assert response.data["customers"][0]["joinedDate"] == "Fri, 1 Mar 2024"


@pytest.mark.asyncio
async def test_customer_insights(front_desk_auth):
    orders = [_order("ORD-3", 2), _order("ORD-2", 12), _order("ORD-1", 62)]
    agent, _, _ = _make_agent(_customer(), orders)
    response = await _call(agent, "getCustomerInsights", front_desk_auth, customerId="CUST-001")

    data = response.data
    assert data["recentActivity"]["ordersLast30Days"] == 2
    assert data["recentActivity"]["spentLast30Days"] == "KES 3,000"
    assert data["preferences"]["topGarmentTypes"] == [{"type": "Shirt", "count": 3}]
    assert {"service": "wash", "count": 3} in data["preferences"]["topServices"]
    assert data["engagement"]["avgDaysBetweenOrders"] == 30
