"""Prompt and keyword rules for analytics natural-language questions.

Exports:
    ANALYTICS_SYSTEM_PROMPT: Business analyst persona for executive answers.
    BusinessIntent: Analytics question categories.
    classify_business_intent: Keyword classification of a question.
"""

from __future__ import annotations

import re
from enum import Enum

ANALYTICS_SYSTEM_PROMPT = """You are a Business Analyst for Lorenzo Dry Cleaners.
Your role is to analyze business data and provide clear, actionable insights for executives.

## Response Guidelines
- Be concise but comprehensive
- Lead with the key insight or answer
- Use specific numbers (KES amounts, percentages, counts)
- Compare to previous periods when relevant
- Highlight concerns and opportunities
- Suggest actionable next steps
- Use professional business language
- Format currency as "KES X,XXX"
- Keep responses focused (3-5 sentences for simple queries, more for complex analysis)

## When presenting data:
- Revenue: Show actual vs target, % change from previous period
- Orders: Show counts by status, completion rates, turnaround times
- Customers: Focus on value (totalSpent), retention, acquisition
- Staff: Show performance scores, rankings, productivity
- Branches: Compare side-by-side with key metrics
- Delivery: Efficiency, on-time rates, driver performance

Always provide context for numbers - are they good or bad? What action should be taken?"""


class BusinessIntent(str, Enum):
    REVENUE = "ANALYTICS_REVENUE"
    ORDERS = "ANALYTICS_ORDERS"
    CUSTOMERS = "ANALYTICS_CUSTOMERS"
    STAFF = "ANALYTICS_STAFF"
    BRANCH = "ANALYTICS_BRANCH"
    DELIVERY = "ANALYTICS_DELIVERY"
    TREND = "ANALYTICS_TREND"
    FORECAST = "ANALYTICS_FORECAST"
    GENERAL = "ANALYTICS_GENERAL"


# First match wins.
_INTENT_RULES: list[tuple[BusinessIntent, re.Pattern]] = [
    (BusinessIntent.REVENUE, re.compile(r"revenue|sales|income|earnings|money|profit|margin")),
    (BusinessIntent.ORDERS, re.compile(r"orders?|pending|completed|overdue|backlog|pipeline")),
    (
        BusinessIntent.CUSTOMERS,
        re.compile(r"customer|client|retention|acquisition|top customer|loyal"),
    ),
    (BusinessIntent.STAFF, re.compile(r"staff|employee|performance|productivity|team|worker")),
    (
        BusinessIntent.BRANCH,
        re.compile(r"branch|location|store|compare|kilimani|westlands|karen"),
    ),
    (BusinessIntent.DELIVERY, re.compile(r"deliver|driver|pickup|route|dispatch")),
    (
        BusinessIntent.TREND,
        re.compile(r"trend|growth|decline|change|compared|vs|versus|drop|increase"),
    ),
    (BusinessIntent.FORECAST, re.compile(r"forecast|predict|projection|expect|future|next")),
]


def classify_business_intent(query: str) -> BusinessIntent:
    lowered = query.lower()
    for intent, pattern in _INTENT_RULES:
        if pattern.search(lowered):
            return intent
    return BusinessIntent.GENERAL
