"""Analytics agent package.

Exports:
    AnalyticsAgent: Business analytics specialist.
    ANALYTICS_CAPABILITIES: The analytics agent's capability list.
    TimePeriod: Reporting period names.
    DateRange: A reporting period's bounds and display label.
    date_range_for_period: Calendar range for a period.
"""

from src.dispatch.agents.analytics.agent import AnalyticsAgent
from src.dispatch.agents.analytics.capabilities import ANALYTICS_CAPABILITIES
from src.dispatch.agents.analytics.periods import (
    DateRange,
    TimePeriod,
    date_range_for_period,
)

__all__ = [
    "AnalyticsAgent",
    "ANALYTICS_CAPABILITIES",
    "DateRange",
    "TimePeriod",
    "date_range_for_period",
]
