"""Typed parameters for support actions that accept enum values."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.dispatch.agents.support.store import TicketPriority, TicketStatus


class CreateTicketParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subject: str
    description: str
    priority: TicketPriority = TicketPriority.MEDIUM
    order_id: str | None = None


class UpdateTicketParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ticket_id: str
    status: TicketStatus | None = None
    assigned_to: str | None = None
    notes: str | None = None


class TicketFilterParams(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: TicketStatus | None = None
    limit: int = 50
