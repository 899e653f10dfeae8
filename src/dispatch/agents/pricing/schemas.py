"""Pydantic parameter models for the Pricing Agent."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QuoteItem(BaseModel):
    """One garment line in a quote request."""

    type: str = Field(min_length=1)
    services: list[str] = Field(default_factory=list)
    quantity: int = Field(default=1, ge=1)


class QuoteParams(BaseModel):
    """Parameters for getQuote. An empty item list is reported by the agent."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[QuoteItem]
    branch_id: str | None = None
