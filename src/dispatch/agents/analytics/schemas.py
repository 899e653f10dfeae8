"""Typed parameters for analytics actions."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.dispatch.agents.analytics.periods import TimePeriod


class PeriodParams(BaseModel):
    """Any analytics action scoped to a reporting period."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    period: TimePeriod
    branch_id: str | None = None


class TrendParams(PeriodParams):
    metric: str
