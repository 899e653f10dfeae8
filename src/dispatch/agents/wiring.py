"""Agent wiring: build every agent and register it with the router.

Specialists need their storage collaborators; any specialist whose
repositories are not supplied is skipped with a log line rather than
failing startup. Agents with built-in defaults (pricing, support and the
orchestrator) are always registered.

Exports:
    AgentRepositories: The storage collaborators handed to specialists.
    initialize_agents: Build and register all agents once per process.
    reset_initialization: Allow initialize_agents to run again (tests).
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from src.dispatch.agents.analytics import AnalyticsAgent
from src.dispatch.agents.customer import CustomerAgent
from src.dispatch.agents.logistics import LogisticsAgent
from src.dispatch.agents.onboarding import OnboardingAgent
from src.dispatch.agents.orchestrator import (
    HistoryStore,
    InMemoryHistoryStore,
    OrchestratorAgent,
    RedisHistoryStore,
)
from src.dispatch.agents.order import OrderAgent
from src.dispatch.agents.pricing import PricingAgent
from src.dispatch.agents.repositories import (
    AnalyticsRepository,
    CustomerRepository,
    OrderRepository,
    PickupRepository,
    PricingRepository,
    VerificationRepository,
)
from src.dispatch.agents.router import AgentRouter, get_agent_router
from src.dispatch.agents.support import SupportAgent, TicketStore
from src.dispatch.config import HistoryBackend, get_settings
from src.dispatch.core.redis import get_redis_pool
from src.dispatch.services.completion import CompletionService, get_completion_service

logger = structlog.get_logger(__name__)


@dataclass
class AgentRepositories:
    """Storage collaborators for the specialists. None means unavailable."""

    orders: OrderRepository | None = None
    customers: CustomerRepository | None = None
    pricing: PricingRepository | None = None
    pickups: PickupRepository | None = None
    verifications: VerificationRepository | None = None
    analytics: AnalyticsRepository | None = None
    tickets: TicketStore | None = None


_initialized = False


def _default_history_store() -> HistoryStore:
    settings = get_settings()
    if settings.HISTORY_BACKEND == HistoryBackend.redis:
        return RedisHistoryStore(get_redis_pool(), ttl_seconds=settings.HISTORY_TTL_SECONDS)
    return InMemoryHistoryStore()


def initialize_agents(
    repositories: AgentRepositories | None = None,
    completion_service: CompletionService | None = None,
    history_store: HistoryStore | None = None,
    router: AgentRouter | None = None,
) -> AgentRouter:
    """Register every agent with ``router`` (the global router by default).

    Runs once per process; later calls return the router unchanged.
    """
    global _initialized
    router = router if router is not None else get_agent_router()
    if _initialized:
        return router

    repos = repositories if repositories is not None else AgentRepositories()
    completion = completion_service if completion_service is not None else get_completion_service()
    settings = get_settings()

    router.register(PricingAgent(repos.pricing))
    router.register(SupportAgent(repos.tickets))

    if repos.orders is not None:
        router.register(OrderAgent(repos.orders))
    else:
        logger.warning("agent_skipped", agent="order-agent", missing="orders")

    if repos.customers is not None and repos.orders is not None:
        router.register(CustomerAgent(repos.customers, repos.orders))
    else:
        logger.warning("agent_skipped", agent="customer-agent", missing="customers/orders")

    if repos.pickups is not None and repos.customers is not None:
        router.register(LogisticsAgent(repos.pickups, repos.customers))
    else:
        logger.warning("agent_skipped", agent="logistics-agent", missing="pickups/customers")

    if repos.verifications is not None and repos.customers is not None:
        router.register(OnboardingAgent(repos.verifications, repos.customers))
    else:
        logger.warning(
            "agent_skipped", agent="onboarding-agent", missing="verifications/customers"
        )

    if repos.analytics is not None:
        router.register(AnalyticsAgent(repos.analytics, completion))
    else:
        logger.warning("agent_skipped", agent="analytics-agent", missing="analytics")

    router.register(
        OrchestratorAgent(
            router,
            completion,
            history_store=history_store if history_store is not None else _default_history_store(),
            max_history=settings.HISTORY_MAX_MESSAGES,
        )
    )

    _initialized = True
    logger.info("agents_initialized", agent_count=len(router), agents=sorted(router.get_all_agents()))
    return router


def reset_initialization() -> None:
    global _initialized
    _initialized = False
