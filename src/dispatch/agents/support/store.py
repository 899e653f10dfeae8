"""Support ticket model and storage.

Exports:
    TicketStatus, TicketPriority: Ticket lifecycle and urgency enums.
    SupportTicket: One support ticket.
    TicketStore: Storage protocol the support agent depends on.
    InMemoryTicketStore: Process-local store used by default.
    generate_ticket_id: New ``{PREFIX}-{epoch_ms}-{5 base36}`` ticket id.
"""

from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

_BASE36 = string.digits + string.ascii_lowercase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_ticket_id(prefix: str = "TKT") -> str:
    suffix = "".join(random.choices(_BASE36, k=5))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}".upper()


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class SupportTicket(BaseModel):
    """A customer support ticket.

    ``customer_id`` is the customer's id, or the session id for guests.
    """

    ticket_id: str
    customer_id: str
    subject: str
    description: str
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    order_id: str | None = None
    assigned_to: str | None = None
    notes: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class TicketStore(Protocol):
    async def save(self, ticket: SupportTicket) -> None: ...
    async def get(self, ticket_id: str) -> SupportTicket | None: ...
    async def list_all(self) -> list[SupportTicket]: ...


class InMemoryTicketStore:
    """Tickets kept in a dict. Lost on restart."""

    def __init__(self) -> None:
        self._tickets: dict[str, SupportTicket] = {}

    async def save(self, ticket: SupportTicket) -> None:
        self._tickets[ticket.ticket_id] = ticket

    async def get(self, ticket_id: str) -> SupportTicket | None:
        return self._tickets.get(ticket_id)

    async def list_all(self) -> list[SupportTicket]:
        """All tickets, newest first."""
        return sorted(self._tickets.values(), key=lambda t: t.created_at, reverse=True)

    def __len__(self) -> int:
        return len(self._tickets)
