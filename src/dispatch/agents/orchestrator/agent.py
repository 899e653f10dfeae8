"""Orchestrator Agent: the conversational front door for customers.

Turns a free-text message into a classified intent, calls specialist agents
through the router when the intent needs live data, and has the completion
service phrase the reply in the Melvin persona. Keeps per-session history in
an injected HistoryStore.

Without a configured completion provider the orchestrator still answers:
messages are classified by keyword rules and answered from canned replies.

Exports:
    OrchestratorAgent: The conversational orchestrator.
"""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, AsyncIterator

from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus
from src.dispatch.agents.orchestrator import prompts
from src.dispatch.agents.orchestrator.capabilities import ORCHESTRATOR_CAPABILITIES
from src.dispatch.agents.orchestrator.classifier import (
    CompletionIntentClassifier,
    Intent,
    IntentClassifier,
    KeywordIntentClassifier,
)
from src.dispatch.agents.orchestrator.history import HistoryStore, InMemoryHistoryStore
from src.dispatch.core.auth import AuthContext, UserType
from src.dispatch.services.completion import CompletionService

if TYPE_CHECKING:
    from src.dispatch.agents.router import AgentRouter

CHATBOT_SOURCE = "website-chatbot"


@dataclass
class _Turn:
    reply: str
    intent: str
    confidence: float
    requires_login: bool = False
    agent_data: Any = None


class OrchestratorAgent(BaseAgent):
    """Conversational agent that routes customer questions to specialists.

    Args:
        router: Router used for specialist sub-requests.
        completion_service: Completion provider. When it reports
            is_configured() False every turn uses keyword fallback.
        history_store: Where per-session history lives. Defaults to an
            in-memory store.
        classifier: Intent classifier used when completion is configured.
            Defaults to one backed by ``completion_service``.
        fallback_classifier: Classifier used in fallback mode.
        max_history: Number of history entries kept per session.
    """

    name = "orchestrator-agent"
    description = (
        "Main conversational agent that provides human-like responses and routes to specialists"
    )
    capabilities = ORCHESTRATOR_CAPABILITIES

    def __init__(
        self,
        router: AgentRouter,
        completion_service: CompletionService,
        history_store: HistoryStore | None = None,
        classifier: IntentClassifier | None = None,
        fallback_classifier: IntentClassifier | None = None,
        max_history: int = 20,
    ) -> None:
        super().__init__()
        self._router = router
        self._completion = completion_service
        self._history = history_store if history_store is not None else InMemoryHistoryStore()
        self._classifier = (
            classifier if classifier is not None else CompletionIntentClassifier(completion_service)
        )
        self._fallback_classifier = (
            fallback_classifier if fallback_classifier is not None else KeywordIntentClassifier()
        )
        self._max_history = max_history
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_holders: dict[str, int] = {}

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "chat": self._handle_chat,
            "clearHistory": self._handle_clear_history,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")
        return await handler(params, auth)

    # ── Session Serialization ────────────────────────────────────────────────

    @asynccontextmanager
    async def _session_lock(self, session_id: str) -> AsyncIterator[None]:
        """Serialize turns for one session; locks are dropped once unused."""
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._lock_holders[session_id] = self._lock_holders.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[session_id] -= 1
            if self._lock_holders[session_id] == 0:
                del self._lock_holders[session_id]
                self._locks.pop(session_id, None)

    # ── Chat ─────────────────────────────────────────────────────────────────

    async def _handle_chat(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        message = str(params["message"])
        session_id = auth.session_id

        async with self._session_lock(session_id):
            try:
                history = await self._history.get(session_id)
            except Exception as exc:
                self._logger.error(
                    "history_load_failed", session_id=session_id, error=str(exc), exc_info=True
                )
                history = []

            try:
                if self._completion.is_configured():
                    turn = await self._completion_turn(message, history, auth)
                else:
                    turn = await self._fallback_turn(message, auth)
            except Exception as exc:
                self._logger.error(
                    "orchestrator_turn_failed",
                    session_id=session_id,
                    error=str(exc),
                    exc_info=True,
                )
                turn = _Turn(reply=prompts.random_apology(), intent="ERROR", confidence=0.0)

            history = [
                *history,
                {"role": "user", "content": message},
                {"role": "assistant", "content": turn.reply},
            ][-self._max_history:]
            try:
                await self._history.save(session_id, history)
            except Exception as exc:
                self._logger.error(
                    "history_save_failed", session_id=session_id, error=str(exc), exc_info=True
                )

        self._logger.info(
            "chat_turn_completed",
            session_id=session_id,
            intent=turn.intent,
            requires_login=turn.requires_login,
        )
        return self.success_response(
            data={
                "message": turn.reply,
                "intent": turn.intent,
                "confidence": turn.confidence,
                "requiresLogin": turn.requires_login,
                "agentData": turn.agent_data,
            },
            message=turn.reply,
        )

    async def _fallback_turn(self, message: str, auth: AuthContext) -> _Turn:
        result = await self._fallback_classifier.classify(message)
        return _Turn(
            reply=prompts.fallback_reply(result.intent, auth),
            intent="FALLBACK",
            confidence=1.0,
        )

    async def _completion_turn(
        self, message: str, history: list[dict], auth: AuthContext
    ) -> _Turn:
        result = await self._classifier.classify(message)
        intent = result.intent
        entities = result.entities
        is_guest = auth.user_type == UserType.GUEST

        turn = _Turn(reply="", intent=intent.value, confidence=result.confidence)

        async def reply(context: str | None = None) -> str:
            return await self._completion.generate_response(message, history, context)

        async def reply_with(data: Any, data_type: str) -> str:
            return await self._completion.generate_data_response(message, data, data_type, history)

        if intent in prompts.LOGIN_REQUIRED_CONTEXTS and is_guest:
            turn.requires_login = True
            turn.reply = await reply(prompts.LOGIN_REQUIRED_CONTEXTS[intent])
            return turn

        if intent in (Intent.ORDER_TRACKING, Intent.ORDER_HISTORY):
            order_id = entities.get("orderId")
            if order_id:
                response = await self._call("order-agent", "getOrderStatus", {"orderId": order_id}, auth)
                if response.ok:
                    turn.agent_data = response.data
                    turn.reply = await reply_with(response.data, "order")
                else:
                    turn.reply = await reply(prompts.ORDER_NOT_FOUND_CONTEXT.format(error=response.error))
            else:
                response = await self._call("order-agent", "getLatestOrder", {}, auth)
                if response.ok and response.data:
                    turn.agent_data = response.data
                    turn.reply = await reply_with(response.data, "order")
                else:
                    turn.reply = await reply(prompts.NO_ORDERS_CONTEXT)

        elif intent == Intent.PRICING:
            garment_type = entities.get("garmentType")
            if garment_type:
                response = await self._call(
                    "pricing-agent", "getGarmentPrice", {"garmentType": garment_type}, auth
                )
                if response.ok:
                    turn.agent_data = response.data
                    turn.reply = await reply_with(response.data, "pricing")
                else:
                    turn.reply = await reply(prompts.NO_GARMENT_PRICE_CONTEXT)
            else:
                response = await self._call("pricing-agent", "getServicePricing", {}, auth)
                if response.ok:
                    turn.agent_data = response.data
                    turn.reply = await reply_with(response.data, "pricing")
                else:
                    turn.reply = await reply()

        elif intent == Intent.SERVICES:
            response = await self._call("pricing-agent", "getServicePricing", {}, auth)
            if response.ok:
                turn.agent_data = response.data
                turn.reply = await reply_with(response.data, "pricing")
            else:
                turn.reply = await reply(prompts.SERVICES_CONTEXT)

        elif intent in prompts.SCRIPTED_CONTEXTS:
            turn.reply = await reply(prompts.SCRIPTED_CONTEXTS[intent])

        elif intent == Intent.REGISTER:
            context = prompts.REGISTER_GUEST_CONTEXT if is_guest else prompts.REGISTER_MEMBER_CONTEXT
            turn.reply = await reply(context)

        elif intent == Intent.CONTACT:
            response = await self._call("support-agent", "getContactInfo", {}, auth)
            if response.ok:
                turn.agent_data = response.data
                turn.reply = await reply_with(response.data, "contact")
            else:
                turn.reply = await reply(prompts.CONTACT_CONTEXT)

        elif intent == Intent.SUPPORT:
            response = await self._call("support-agent", "escalateToHuman", {"reason": message}, auth)
            if response.ok:
                turn.agent_data = response.data
                turn.reply = await reply_with(response.data, "support")
            else:
                turn.reply = await reply(prompts.SUPPORT_UNAVAILABLE_CONTEXT)

        elif intent == Intent.SCHEDULE_PICKUP:
            slot_date = entities.get("date") or date.today().isoformat()
            response = await self._call("logistics-agent", "get_available_slots", {"date": slot_date}, auth)
            if response.ok:
                turn.agent_data = response.data
                slots = json.dumps(response.data, default=str)
                turn.reply = await reply(prompts.PICKUP_SLOTS_CONTEXT.format(slots=slots))
            else:
                turn.reply = await reply(prompts.PICKUP_SLOTS_UNAVAILABLE_CONTEXT)

        elif intent == Intent.PICKUP_STATUS:
            request_id = entities.get("requestId")
            if request_id:
                response = await self._call(
                    "logistics-agent", "get_pickup_status", {"requestId": request_id}, auth
                )
                if response.ok:
                    turn.agent_data = response.data
                    turn.reply = await reply_with(response.data, "support")
                else:
                    turn.reply = await reply(prompts.PICKUP_NOT_FOUND_CONTEXT)
            else:
                response = await self._call("logistics-agent", "get_my_pickups", {"limit": 5}, auth)
                if response.ok and response.data:
                    turn.agent_data = response.data
                    turn.reply = await reply_with(response.data, "support")
                else:
                    turn.reply = await reply(prompts.NO_PICKUPS_CONTEXT)

        elif intent == Intent.CANCEL_PICKUP:
            request_id = entities.get("requestId")
            if request_id:
                response = await self._call(
                    "logistics-agent", "cancel_pickup", {"requestId": request_id}, auth
                )
                if response.ok:
                    turn.reply = await reply(
                        prompts.PICKUP_CANCELLED_CONTEXT.format(request_id=request_id)
                    )
                else:
                    turn.reply = await reply(
                        prompts.PICKUP_CANCEL_FAILED_CONTEXT.format(error=response.error)
                    )
            else:
                turn.reply = await reply(prompts.PICKUP_ID_NEEDED_CONTEXT)

        else:
            turn.reply = await reply()

        return turn

    async def _call(
        self, agent_name: str, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        response = await self._router.send_request(
            agent_name, action, params, auth, from_agent=CHATBOT_SOURCE
        )
        if not response.ok:
            self._logger.info(
                "specialist_call_unsuccessful",
                to_agent=agent_name,
                action=action,
                status=response.status.value,
                error=response.error,
            )
        return response

    # ── Clear History ────────────────────────────────────────────────────────

    async def _handle_clear_history(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        # Always the caller's own session, whatever sessionId names.
        async with self._session_lock(auth.session_id):
            await self._history.delete(auth.session_id)
        return self.success_response(data={"cleared": True}, message="Conversation history cleared")
