"""Pydantic parameter models for the Logistics Agent."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PickupAddress(BaseModel):
    address: str = Field(min_length=1)
    coordinates: dict[str, float] | None = None


class SchedulePickupParams(BaseModel):
    """Parameters for schedule_pickup.

    ``preferred_date`` and ``time_slot`` stay strings so the agent can
    answer malformed values with customer-facing messages.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    service_types: list[str] = Field(min_length=1)
    item_description: str
    pickup_address: PickupAddress
    preferred_date: str
    time_slot: str
    express_service: bool = False
    special_instructions: str | None = None
