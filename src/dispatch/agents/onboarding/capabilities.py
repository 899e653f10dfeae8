"""Agent capability declarations for the onboarding agent.

Registration actions are for guests only; a signed-in customer has no use
for them.
"""

from __future__ import annotations

from src.dispatch.agents.base import AgentCapability
from src.dispatch.core.auth import UserType

_GUEST_ONLY = [UserType.GUEST]

ONBOARDING_CAPABILITIES: list[AgentCapability] = [
    AgentCapability(
        action="initiate_registration",
        description="Start the customer registration process",
        required_params=["name", "phone", "email"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="verify_phone",
        description="Verify phone number with WhatsApp OTP",
        required_params=["requestId", "otp"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="verify_email",
        description="Verify email address with token",
        required_params=["token"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="resend_otp",
        description="Resend WhatsApp OTP for phone verification",
        required_params=["requestId"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="resend_email",
        description="Resend email verification link",
        required_params=["requestId"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="complete_registration",
        description="Complete registration with password",
        required_params=["requestId", "password"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="get_verification_status",
        description="Get current verification status",
        required_params=["requestId"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="check_existing_account",
        description="Check if phone or email already has an account",
        optional_params=["phone", "email"],
        allowed_user_types=_GUEST_ONLY,
    ),
    AgentCapability(
        action="update_profile",
        description="Update customer profile information",
        optional_params=["name", "email"],
        requires_auth=True,
        allowed_user_types=[UserType.CUSTOMER],
    ),
    AgentCapability(
        action="request_password_reset",
        description="Request a password reset link",
        required_params=["email"],
        allowed_user_types=_GUEST_ONLY,
    ),
]
