"""Onboarding agent package.

Exports:
    OnboardingAgent: Self-registration and profile specialist.
    ONBOARDING_CAPABILITIES: The onboarding agent's capability list.
    normalize_phone: Kenyan phone number normalization.
"""

from src.dispatch.agents.onboarding.agent import OnboardingAgent
from src.dispatch.agents.onboarding.capabilities import ONBOARDING_CAPABILITIES
from src.dispatch.agents.onboarding.validation import normalize_phone

__all__ = ["OnboardingAgent", "ONBOARDING_CAPABILITIES", "normalize_phone"]
