"""Support agent package.

Exports:
    SupportAgent: Tickets and human escalation specialist.
    SUPPORT_CAPABILITIES: The support agent's capability list.
    SupportTicket: Ticket model.
    TicketStore: Ticket storage protocol.
    InMemoryTicketStore: Default ticket store.
"""

from src.dispatch.agents.support.agent import SupportAgent
from src.dispatch.agents.support.capabilities import SUPPORT_CAPABILITIES
from src.dispatch.agents.support.store import (
    InMemoryTicketStore,
    SupportTicket,
    TicketStore,
)

__all__ = [
    "SupportAgent",
    "SUPPORT_CAPABILITIES",
    "SupportTicket",
    "TicketStore",
    "InMemoryTicketStore",
]
