"""Orchestrator agent for customer conversations.

Exports:
    OrchestratorAgent: Conversational agent that routes to specialists.
    ORCHESTRATOR_CAPABILITIES: chat and clearHistory capabilities.
    Intent, IntentResult, IntentClassifier: Classification types.
    KeywordIntentClassifier, CompletionIntentClassifier: Classifier strategies.
    HistoryStore, InMemoryHistoryStore, RedisHistoryStore: History storage.
"""

from src.dispatch.agents.orchestrator.agent import OrchestratorAgent
from src.dispatch.agents.orchestrator.capabilities import ORCHESTRATOR_CAPABILITIES
from src.dispatch.agents.orchestrator.classifier import (
    CompletionIntentClassifier,
    Intent,
    IntentClassifier,
    IntentResult,
    KeywordIntentClassifier,
)
from src.dispatch.agents.orchestrator.history import (
    HistoryStore,
    InMemoryHistoryStore,
    RedisHistoryStore,
)

__all__ = [
    "ORCHESTRATOR_CAPABILITIES",
    "CompletionIntentClassifier",
    "HistoryStore",
    "InMemoryHistoryStore",
    "Intent",
    "IntentClassifier",
    "IntentResult",
    "KeywordIntentClassifier",
    "OrchestratorAgent",
    "RedisHistoryStore",
]
