"""Intent classification strategies for the orchestrator.

Two interchangeable classifiers implement the IntentClassifier protocol:
- KeywordIntentClassifier: ordered keyword rules, no external calls. Used
  when no completion provider is configured.
- CompletionIntentClassifier: delegates to CompletionService.classify_intent
  and maps the returned intent string onto the Intent enum.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from src.dispatch.services.completion import CompletionService

logger = structlog.get_logger(__name__)


class Intent(str, Enum):
    ORDER_TRACKING = "ORDER_TRACKING"
    ORDER_HISTORY = "ORDER_HISTORY"
    PRICING = "PRICING"
    SERVICES = "SERVICES"
    HOURS = "HOURS"
    LOCATIONS = "LOCATIONS"
    CONTACT = "CONTACT"
    SUPPORT = "SUPPORT"
    GREETING = "GREETING"
    THANKS = "THANKS"
    GOODBYE = "GOODBYE"
    REGISTER = "REGISTER"
    SCHEDULE_PICKUP = "SCHEDULE_PICKUP"
    PICKUP_STATUS = "PICKUP_STATUS"
    CANCEL_PICKUP = "CANCEL_PICKUP"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> Intent:
        """Map an arbitrary intent string onto the enum, defaulting to UNKNOWN."""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass
class IntentResult:
    intent: Intent
    confidence: float
    entities: dict[str, str] = field(default_factory=dict)


class IntentClassifier(Protocol):
    async def classify(self, message: str) -> IntentResult: ...


# ── Keyword Classifier ─────────────────────────────────────────────────────


_GREETING_PATTERN = re.compile(r"^(hi|hello|hey|jambo|habari)")
_ORDER_ID_PATTERN = re.compile(r"ORD-[A-Z0-9-]+")

# First matching rule wins.
_KEYWORD_RULES: list[tuple[Intent, tuple[str, ...]]] = [
    (Intent.PRICING, ("price", "cost", "how much")),
    (Intent.ORDER_TRACKING, ("order", "track", "status")),
    (Intent.HOURS, ("hour", "open", "close")),
    (Intent.CONTACT, ("contact", "call", "phone", "whatsapp")),
    (Intent.SUPPORT, ("help", "support", "speak", "human")),
]


class KeywordIntentClassifier:
    """Deterministic keyword rules over the lowercased message."""

    async def classify(self, message: str) -> IntentResult:
        entities: dict[str, str] = {}
        order_match = _ORDER_ID_PATTERN.search(message)
        if order_match:
            entities["orderId"] = order_match.group(0)

        lowered = message.lower().strip()
        if _GREETING_PATTERN.match(lowered):
            return IntentResult(Intent.GREETING, 1.0, entities)

        for intent, keywords in _KEYWORD_RULES:
            if any(keyword in lowered for keyword in keywords):
                return IntentResult(intent, 1.0, entities)

        return IntentResult(Intent.UNKNOWN, 1.0, entities)


# ── Completion Classifier ──────────────────────────────────────────────────


class CompletionIntentClassifier:
    """Classifier backed by the completion service's JSON intent prompt."""

    def __init__(self, completion_service: CompletionService) -> None:
        self._completion = completion_service

    async def classify(self, message: str) -> IntentResult:
        raw = await self._completion.classify_intent(message)
        entities = raw.get("entities") or {}
        if not isinstance(entities, dict):
            entities = {}
        try:
            confidence = float(raw.get("confidence", 0.0))
        except (TypeError, ValueError):
            confidence = 0.0
        result = IntentResult(
            intent=Intent.parse(raw.get("intent", "UNKNOWN")),
            confidence=confidence,
            entities={str(k): str(v) for k, v in entities.items() if v is not None},
        )
        logger.info(
            "intent_classified",
            intent=result.intent.value,
            confidence=result.confidence,
            entities=sorted(result.entities),
        )
        return result
