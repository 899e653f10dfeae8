"""Tests for the OrchestratorAgent conversational turn.

Specialists are reached through a mocked router; the completion service is a
double from conftest. No LLM or storage is touched.

Covers:
- Keyword fallback mode when completion is unconfigured
- Login-required intents for guests
- Specialist calls per intent and the replies built from their data
- Turn failures turned into apologies
- History persistence and trimming, same-session serialization
- clearHistory always clears the caller's own session
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dispatch.agents.base import AgentRequest, AgentResponse, ResponseStatus
from src.dispatch.agents.orchestrator import prompts
from src.dispatch.agents.orchestrator.agent import CHATBOT_SOURCE, OrchestratorAgent
from src.dispatch.agents.orchestrator.classifier import Intent, IntentResult
from src.dispatch.agents.orchestrator.history import InMemoryHistoryStore
from src.dispatch.core.auth import AuthContext


# ── Helpers ──────────────────────────────────────────────────────────────────


def _ok(data: Any) -> AgentResponse:
    return AgentResponse(from_agent="specialist", status=ResponseStatus.SUCCESS, data=data)


def _fail(error: str) -> AgentResponse:
    return AgentResponse(from_agent="specialist", status=ResponseStatus.ERROR, error=error)


def _router(response: AgentResponse | None = None) -> MagicMock:
    router = MagicMock()
    router.send_request = AsyncMock(return_value=response or _ok({}))
    return router


def _classifier(intent: Intent, **entities: str) -> MagicMock:
    classifier = MagicMock()
    classifier.classify = AsyncMock(return_value=IntentResult(intent, 0.9, dict(entities)))
    return classifier


def _make_agent(
    completion,
    router: MagicMock | None = None,
    classifier: MagicMock | None = None,
    history: InMemoryHistoryStore | None = None,
    max_history: int = 20,
) -> OrchestratorAgent:
    return OrchestratorAgent(
        router or _router(),
        completion,
        history_store=history if history is not None else InMemoryHistoryStore(),
        classifier=classifier,
        max_history=max_history,
    )


async def _chat(agent: OrchestratorAgent, message: str, auth: AuthContext) -> AgentResponse:
    return await agent.process_request(
        AgentRequest(
            request_id="req_1_abc",
            to_agent="orchestrator-agent",
            action="chat",
            params={"message": message},
            auth=auth,
        )
    )


# ── Fallback Mode ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fallback_reply_without_completion(completion_factory, guest_auth):
    """Unconfigured completion answers from canned replies with intent FALLBACK."""
    completion = completion_factory(configured=False)
    agent = _make_agent(completion)

    response = await _chat(agent, "What are your hours?", guest_auth)

    assert response.ok
    assert response.data["intent"] == "FALLBACK"
    assert response.data["confidence"] == 1.0
    assert "Mon - Fri" in response.data["message"]
    assert response.message == response.data["message"]
    completion.generate_response.assert_not_awaited()


@pytest.mark.asyncio
async def test_fallback_order_tracking_depends_on_login(completion_factory, guest_auth, customer_auth):
    agent = _make_agent(completion_factory(configured=False))
    guest = await _chat(agent, "track my order", guest_auth)
    member = await _chat(agent, "track my order", customer_auth)
    assert "log in" in guest.data["message"]
    assert "ORD-MAIN-XXXXXXXX-XXXX" in member.data["message"]


@pytest.mark.asyncio
async def test_fallback_turns_are_saved(completion_factory, guest_auth):
    history = InMemoryHistoryStore()
    agent = _make_agent(completion_factory(configured=False), history=history)
    await _chat(agent, "hello", guest_auth)
    saved = await history.get(guest_auth.session_id)
    assert [m["role"] for m in saved] == ["user", "assistant"]
    assert saved[0]["content"] == "hello"


# ── Completion Mode ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_guest_order_tracking_requires_login(completion_factory, guest_auth):
    """Login-required intents short-circuit for guests without calling specialists."""
    completion = completion_factory()
    router = _router()
    agent = _make_agent(completion, router, _classifier(Intent.ORDER_TRACKING))

    response = await _chat(agent, "Where is my order?", guest_auth)

    assert response.data["requiresLogin"] is True
    assert response.data["intent"] == "ORDER_TRACKING"
    router.send_request.assert_not_awaited()
    context = completion.generate_response.await_args.args[2]
    assert context == prompts.LOGIN_REQUIRED_CONTEXTS[Intent.ORDER_TRACKING]


@pytest.mark.asyncio
async def test_order_tracking_with_order_id(completion_factory, customer_auth):
    """An extracted order id is looked up and the data folded into the reply."""
    completion = completion_factory(reply="Your order is ready!")
    order = {"orderId": "ORD-1", "status": "ready"}
    router = _router(_ok(order))
    agent = _make_agent(completion, router, _classifier(Intent.ORDER_TRACKING, orderId="ORD-1"))

    response = await _chat(agent, "Where is ORD-1?", customer_auth)

    router.send_request.assert_awaited_once_with(
        "order-agent", "getOrderStatus", {"orderId": "ORD-1"}, customer_auth, from_agent=CHATBOT_SOURCE
    )
    assert response.data["agentData"] == order
    assert response.data["message"] == "Your order is ready!"
    completion.generate_data_response.assert_awaited_once()
    assert completion.generate_data_response.await_args.args[2] == "order"


@pytest.mark.asyncio
async def test_order_tracking_not_found(completion_factory, customer_auth):
    completion = completion_factory()
    agent = _make_agent(
        completion, _router(_fail("Order not found.")), _classifier(Intent.ORDER_TRACKING, orderId="X")
    )
    response = await _chat(agent, "Where is X?", customer_auth)
    assert response.data["agentData"] is None
    context = completion.generate_response.await_args.args[2]
    assert "Order not found." in context


@pytest.mark.asyncio
async def test_order_tracking_without_id_uses_latest(completion_factory, customer_auth):
    router = _router(_ok(None))
    completion = completion_factory()
    agent = _make_agent(completion, router, _classifier(Intent.ORDER_HISTORY))
    await _chat(agent, "my orders", customer_auth)
    assert router.send_request.await_args.args[:2] == ("order-agent", "getLatestOrder")
    assert completion.generate_response.await_args.args[2] == prompts.NO_ORDERS_CONTEXT


@pytest.mark.asyncio
async def test_pricing_with_garment(completion_factory, guest_auth):
    router = _router(_ok({"garmentType": "Suit"}))
    agent = _make_agent(completion_factory(), router, _classifier(Intent.PRICING, garmentType="Suit"))
    response = await _chat(agent, "How much for a suit?", guest_auth)
    assert router.send_request.await_args.args[:3] == (
        "pricing-agent",
        "getGarmentPrice",
        {"garmentType": "Suit"},
    )
    assert response.data["agentData"] == {"garmentType": "Suit"}


@pytest.mark.asyncio
async def test_support_escalates_with_message(completion_factory, guest_auth):
    router = _router(_ok({"ticketId": "ESC-1"}))
    agent = _make_agent(completion_factory(), router, _classifier(Intent.SUPPORT))
    await _chat(agent, "I want a human", guest_auth)
    assert router.send_request.await_args.args[:3] == (
        "support-agent",
        "escalateToHuman",
        {"reason": "I want a human"},
    )


@pytest.mark.asyncio
async def test_scripted_intent_uses_context(completion_factory, guest_auth):
    completion = completion_factory()
    router = _router()
    agent = _make_agent(completion, router, _classifier(Intent.HOURS))
    await _chat(agent, "When are you open?", guest_auth)
    router.send_request.assert_not_awaited()
    assert completion.generate_response.await_args.args[2] == prompts.SCRIPTED_CONTEXTS[Intent.HOURS]


@pytest.mark.asyncio
async def test_cancel_pickup_without_request_id(completion_factory, customer_auth):
    completion = completion_factory()
    router = _router()
    agent = _make_agent(completion, router, _classifier(Intent.CANCEL_PICKUP))
    await _chat(agent, "cancel my pickup", customer_auth)
    router.send_request.assert_not_awaited()
    assert completion.generate_response.await_args.args[2] == prompts.PICKUP_ID_NEEDED_CONTEXT


@pytest.mark.asyncio
async def test_schedule_pickup_passes_date(completion_factory, customer_auth):
    router = _router(_ok({"slots": ["morning"]}))
    agent = _make_agent(completion_factory(), router, _classifier(Intent.SCHEDULE_PICKUP, date="tomorrow"))
    await _chat(agent, "pickup tomorrow", customer_auth)
    assert router.send_request.await_args.args[:3] == (
        "logistics-agent",
        "get_available_slots",
        {"date": "tomorrow"},
    )


# ── Failures ─────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_turn_failure_returns_apology(completion_factory, guest_auth):
    """Exceptions during a turn become a scripted apology, still a success."""
    completion = completion_factory()
    completion.generate_response = AsyncMock(side_effect=RuntimeError("provider down"))
    history = InMemoryHistoryStore()
    agent = _make_agent(completion, classifier=_classifier(Intent.GREETING), history=history)

    response = await _chat(agent, "hi", guest_auth)

    assert response.ok
    assert response.data["intent"] == "ERROR"
    assert response.data["message"] in prompts.FALLBACK_APOLOGIES
    assert len(await history.get(guest_auth.session_id)) == 2


# ── History ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_history_is_trimmed(completion_factory, guest_auth):
    history = InMemoryHistoryStore()
    agent = _make_agent(completion_factory(configured=False), history=history, max_history=4)
    for i in range(5):
        await _chat(agent, f"message {i}", guest_auth)
    saved = await history.get(guest_auth.session_id)
    assert len(saved) == 4
    assert saved[0]["content"] == "message 3"


@pytest.mark.asyncio
async def test_same_session_turns_are_serialized(completion_factory, guest_auth):
    """Concurrent turns in one session both land in history."""
    completion = completion_factory()

    async def slow_reply(message, history, context=None):
        await asyncio.sleep(0.01)
        return f"reply to {message}"

    completion.generate_response = AsyncMock(side_effect=slow_reply)
    history = InMemoryHistoryStore()
    agent = _make_agent(completion, classifier=_classifier(Intent.GREETING), history=history)

    await asyncio.gather(_chat(agent, "one", guest_auth), _chat(agent, "two", guest_auth))

    saved = await history.get(guest_auth.session_id)
    assert len(saved) == 4
    assert {m["content"] for m in saved if m["role"] == "user"} == {"one", "two"}
    assert agent._locks == {}


@pytest.mark.asyncio
async def test_clear_history_own_session(completion_factory, guest_auth):
    history = InMemoryHistoryStore()
    agent = _make_agent(completion_factory(configured=False), history=history)
    await _chat(agent, "hello", guest_auth)

    response = await agent.process_request(
        AgentRequest(
            request_id="req_2",
            to_agent="orchestrator-agent",
            action="clearHistory",
            params={"sessionId": guest_auth.session_id},
            auth=guest_auth,
        )
    )
    assert response.ok
    assert response.data == {"cleared": True}
    assert await history.get(guest_auth.session_id) == []


@pytest.mark.asyncio
async def test_clear_history_ignores_other_session_id(completion_factory, guest_auth):
    """A sessionId naming someone else still clears only the caller's session."""
    history = InMemoryHistoryStore()
    await history.save("someone-else", [{"role": "user", "content": "hi"}])
    agent = _make_agent(completion_factory(configured=False), history=history)
    await _chat(agent, "hello", guest_auth)

    response = await agent.process_request(
        AgentRequest(
            request_id="req_2",
            to_agent="orchestrator-agent",
            action="clearHistory",
            params={"sessionId": "someone-else"},
            auth=guest_auth,
        )
    )
    assert response.ok
    assert response.data == {"cleared": True}
    assert await history.get(guest_auth.session_id) == []
    assert len(await history.get("someone-else")) == 1


# ── Injection ────────────────────────────────────────────────────────────────


def test_empty_history_store_is_kept(completion_factory):
    """An injected store is used even while it holds no sessions."""
    history = InMemoryHistoryStore()
    assert len(history) == 0
    agent = _make_agent(completion_factory(configured=False), history=history)
    assert agent._history is history


@pytest.mark.asyncio
async def test_greeting_fallback_saved_to_injected_store(completion_factory, guest_auth):
    history = InMemoryHistoryStore()
    agent = OrchestratorAgent(_router(), completion_factory(configured=False), history_store=history)

    response = await _chat(agent, "hi", guest_auth)

    assert response.data["message"] == prompts._FALLBACK_REPLIES[Intent.GREETING]
    assert len(await history.get(guest_auth.session_id)) == 2


# ── History Store Faults ─────────────────────────────────────────────────────


def _broken_store() -> MagicMock:
    store = MagicMock()
    store.get = AsyncMock(side_effect=ConnectionError("redis down"))
    store.save = AsyncMock(side_effect=ConnectionError("redis down"))
    store.delete = AsyncMock()
    return store


@pytest.mark.asyncio
async def test_history_store_outage_still_replies(completion_factory, guest_auth):
    """A store that fails to load or save does not fail the turn."""
    store = _broken_store()
    agent = _make_agent(completion_factory(configured=False), history=store)

    response = await _chat(agent, "hi", guest_auth)

    assert response.ok
    assert response.data["message"] == prompts._FALLBACK_REPLIES[Intent.GREETING]
    saved = store.save.await_args.args[1]
    assert [m["role"] for m in saved] == ["user", "assistant"]


@pytest.mark.asyncio
async def test_history_load_failure_uses_empty_history(completion_factory, guest_auth):
    completion = completion_factory()
    store = _broken_store()
    agent = _make_agent(completion, classifier=_classifier(Intent.GREETING), history=store)

    response = await _chat(agent, "hello there", guest_auth)

    assert response.ok
    assert response.data["intent"] == "GREETING"
    assert completion.generate_response.await_args.args[1] == []
