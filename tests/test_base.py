"""Tests for the agent protocol and BaseAgent.process_request().

Covers:
- Capability lookup and the order of authorization checks
- Required parameter and typed input_schema validation
- Handler exceptions converted to error responses
- request_id / from_agent stamping on every response
- AgentResponse status/error consistency
- Display formatting helpers
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

import pytest
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from src.dispatch.agents.base import (
    AgentCapability,
    AgentRequest,
    AgentResponse,
    BaseAgent,
    ResponseStatus,
    format_currency,
    format_date,
    format_datetime,
)
from src.dispatch.core.auth import AuthContext, StaffRole, UserType


# ── Helpers ──────────────────────────────────────────────────────────────────


class _LimitParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page_size: int = Field(ge=1, le=100)


class StubAgent(BaseAgent):
    """Concrete agent recording what handle() receives."""

    name = "stub-agent"
    description = "Stub agent for protocol tests"
    capabilities = [
        AgentCapability(action="echo", description="Echo params", required_params=["text"]),
        AgentCapability(action="members", description="Members only", requires_auth=True),
        AgentCapability(
            action="customersOnly",
            description="Customers only",
            allowed_user_types=[UserType.CUSTOMER],
        ),
        AgentCapability(
            action="managersOnly",
            description="Managers only",
            allowed_staff_roles=[StaffRole.STORE_MANAGER, StaffRole.ADMIN],
        ),
        AgentCapability(action="typed", description="Typed params", input_schema=_LimitParams),
        AgentCapability(action="explode", description="Always fails"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def handle(self, action: str, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        self.calls.append((action, params))
        if action == "explode":
            raise RuntimeError("boom")
        return self.success_response(data=params, message="done")


def _request(action: str, auth: AuthContext | None, **params: Any) -> AgentRequest:
    return AgentRequest(
        request_id="req_1_abc",
        from_agent="tester",
        to_agent="stub-agent",
        action=action,
        params=params,
        auth=auth,
    )


# ── Capability Lookup ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_unknown_action_is_not_found(guest_auth):
    """An action with no declared capability returns not_found."""
    agent = StubAgent()
    response = await agent.process_request(_request("nope", guest_auth))
    assert response.status == ResponseStatus.NOT_FOUND
    assert response.error == "Unknown action: nope"
    assert agent.calls == []


@pytest.mark.asyncio
async def test_missing_auth_context_is_unauthorized():
    """A request without an auth context never reaches handle()."""
    agent = StubAgent()
    response = await agent.process_request(_request("echo", None, text="hi"))
    assert response.status == ResponseStatus.UNAUTHORIZED
    assert response.error == "Missing authentication context"
    assert agent.calls == []


# ── Authorization ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_requires_auth_rejects_guest(guest_auth, customer_auth):
    """requires_auth capabilities reject guests and admit customers."""
    agent = StubAgent()
    denied = await agent.process_request(_request("members", guest_auth))
    assert denied.status == ResponseStatus.UNAUTHORIZED
    assert denied.error == "Please log in to use this feature."

    allowed = await agent.process_request(_request("members", customer_auth))
    assert allowed.ok


@pytest.mark.asyncio
async def test_allowed_user_types_rejects_other_types(store_manager_auth):
    """Callers outside allowed_user_types get a type-specific denial."""
    agent = StubAgent()
    response = await agent.process_request(_request("customersOnly", store_manager_auth))
    assert response.status == ResponseStatus.UNAUTHORIZED
    assert response.error == "This action is not available for staff users."


@pytest.mark.asyncio
async def test_allowed_staff_roles(store_manager_auth, front_desk_auth, customer_auth):
    """Staff role lists admit listed roles only, and never non-staff callers."""
    agent = StubAgent()
    assert (await agent.process_request(_request("managersOnly", store_manager_auth))).ok

    for auth in (front_desk_auth, customer_auth):
        response = await agent.process_request(_request("managersOnly", auth))
        assert response.status == ResponseStatus.UNAUTHORIZED
        assert response.error == "You do not have permission to perform this action."


# ── Parameter Validation ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_missing_required_param(guest_auth):
    """A required parameter that is absent or None is reported by name."""
    agent = StubAgent()
    response = await agent.process_request(_request("echo", guest_auth))
    assert response.status == ResponseStatus.ERROR
    assert response.error == "Missing required parameter: text"

    response = await agent.process_request(_request("echo", guest_auth, text=None))
    assert response.error == "Missing required parameter: text"


@pytest.mark.asyncio
async def test_input_schema_coerces_params(guest_auth):
    """Typed params are validated and merged back under their camelCase names."""
    agent = StubAgent()
    response = await agent.process_request(_request("typed", guest_auth, pageSize="25"))
    assert response.ok
    _, params = agent.calls[0]
    assert params["pageSize"] == 25


@pytest.mark.asyncio
async def test_input_schema_rejects_invalid_params(guest_auth):
    """Schema violations become an error naming the action and field."""
    agent = StubAgent()
    response = await agent.process_request(_request("typed", guest_auth, pageSize=0))
    assert response.status == ResponseStatus.ERROR
    assert response.error.startswith("Invalid parameters for typed:")
    assert "pageSize" in response.error
    assert agent.calls == []


# ── Fault Conversion and Stamping ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_handler_exception_becomes_error(guest_auth):
    """Exceptions from handle() are returned as error responses."""
    agent = StubAgent()
    response = await agent.process_request(_request("explode", guest_auth))
    assert response.status == ResponseStatus.ERROR
    assert response.error == "boom"


@pytest.mark.asyncio
async def test_response_carries_request_id_and_agent_name(guest_auth):
    """Every response echoes the request id and names the handling agent."""
    agent = StubAgent()
    for action in ("echo", "nope", "explode"):
        response = await agent.process_request(_request(action, guest_auth, text="x"))
        assert response.request_id == "req_1_abc"
        assert response.from_agent == "stub-agent"


def test_response_error_must_match_status():
    """Success carries no error; every other status carries one."""
    with pytest.raises(ValidationError):
        AgentResponse(from_agent="a", status=ResponseStatus.SUCCESS, error="bad")
    with pytest.raises(ValidationError):
        AgentResponse(from_agent="a", status=ResponseStatus.ERROR)


def test_response_serializes_camel_case():
    """The JSON form uses the protocol's camelCase field names."""
    response = AgentResponse(request_id="r1", from_agent="a", status=ResponseStatus.SUCCESS)
    dumped = response.model_dump(mode="json", by_alias=True)
    assert dumped["requestId"] == "r1"
    assert dumped["fromAgent"] == "a"
    assert dumped["status"] == "success"


def test_request_accepts_camel_case_payload():
    """Requests can be built from the wire form."""
    request = AgentRequest.model_validate({
        "requestId": "r1",
        "fromAgent": "website-chatbot",
        "toAgent": "order-agent",
        "action": "getOrderStatus",
        "params": {"orderId": "ORD-1"},
        "auth": {"userType": "guest", "sessionId": "s1"},
    })
    assert request.to_agent == "order-agent"
    assert request.auth.session_id == "s1"


# ── Helpers on BaseAgent ─────────────────────────────────────────────────────


def test_scoped_customer_id(customer_auth, store_manager_auth):
    """Customers always resolve to themselves; staff must name a customer."""
    params = {"customerId": "CUST-999"}
    assert BaseAgent.scoped_customer_id(params, customer_auth) == "CUST-001"
    assert BaseAgent.scoped_customer_id(params, store_manager_auth) == "CUST-999"
    assert BaseAgent.scoped_customer_id({}, store_manager_auth) is None


def test_to_routing_info_lists_actions():
    """Routing info names the agent and each action with its description."""
    info = StubAgent().to_routing_info()
    assert info["agent"] == "stub-agent"
    assert {"action": "echo", "description": "Echo params"} in info["capabilities"]
    assert len(info["capabilities"]) == 6


# ── Formatting ───────────────────────────────────────────────────────────────


def test_format_currency():
    assert format_currency(1250) == "KES 1,250"
    assert format_currency(1250.0) == "KES 1,250"
    assert format_currency(99.5) == "KES 99.5"


def test_format_date_and_datetime():
    assert format_date(date(2025, 1, 6)) == "Mon, 6 Jan 2025"
    assert format_datetime(datetime(2025, 1, 6, 14, 5)) == "Mon, 6 Jan 2025 at 14:05"
