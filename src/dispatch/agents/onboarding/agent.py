"""Onboarding Agent: self-registration with phone and email verification.

Registration is a three step flow keyed by a verification request id:
initiate (codes are sent), verify phone OTP and email link in any order,
then complete with a password. The customer account is only created on
completion.

Exports:
    OnboardingAgent: The registration and profile specialist.
"""

from __future__ import annotations

import uuid
from typing import Any

from src.dispatch.agents.base import AgentResponse, BaseAgent, ResponseStatus
from src.dispatch.agents.customer.agent import summarize_customer
from src.dispatch.agents.onboarding.capabilities import ONBOARDING_CAPABILITIES
from src.dispatch.agents.onboarding.validation import (
    INVALID_PHONE,
    is_valid_email,
    normalize_email,
    normalize_phone,
    password_problem,
)
from src.dispatch.agents.repositories import CustomerRepository, VerificationRepository
from src.dispatch.core.auth import AuthContext
from src.dispatch.core.security import hash_password

REQUEST_NOT_FOUND = "Verification request not found. Please start registration again."


def generate_customer_id() -> str:
    return f"CUST-{uuid.uuid4().hex[:8].upper()}"


class OnboardingAgent(BaseAgent):
    """Registration, verification and profile specialist.

    Args:
        verification_repository: Pending registrations and their codes.
        customer_repository: Customer accounts.
    """

    name = "onboarding-agent"
    description = (
        "Handles customer self-registration, WhatsApp OTP verification, "
        "email verification, and profile management."
    )
    capabilities = ONBOARDING_CAPABILITIES

    def __init__(
        self,
        verification_repository: VerificationRepository,
        customer_repository: CustomerRepository,
    ) -> None:
        super().__init__()
        self._verifications = verification_repository
        self._customers = customer_repository

    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        handlers = {
            "initiate_registration": self._handle_initiate,
            "verify_phone": self._handle_verify_phone,
            "verify_email": self._handle_verify_email,
            "resend_otp": self._handle_resend_otp,
            "resend_email": self._handle_resend_email,
            "complete_registration": self._handle_complete,
            "get_verification_status": self._handle_status,
            "check_existing_account": self._handle_check_existing,
            "update_profile": self._handle_update_profile,
            "request_password_reset": self._handle_password_reset,
        }
        handler = handlers.get(action)
        if handler is None:
            return self.error_response(ResponseStatus.NOT_FOUND, f"Unknown action: {action}")
        return await handler(params, auth)

    # ── Registration ─────────────────────────────────────────────────────────

    async def _handle_initiate(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        phone = normalize_phone(str(params["phone"]))
        if phone is None:
            return self.error_response(ResponseStatus.ERROR, INVALID_PHONE)

        email = normalize_email(str(params["email"]))
        if not is_valid_email(email):
            return self.error_response(ResponseStatus.ERROR, "Please provide a valid email address.")

        if await self._customers.get_by_phone(phone) is not None:
            return self.error_response(
                ResponseStatus.ERROR,
                "An account with this phone number already exists. Please log in instead.",
            )

        pending = await self._verifications.get_pending_by_phone(phone)
        if pending is not None:
            return self.success_response(
                data={
                    "requestId": pending["request_id"],
                    "alreadyStarted": True,
                    "phoneVerified": pending.get("whatsapp_verified", False),
                    "emailVerified": pending.get("email_verified", False),
                },
                message="You have a pending registration. Please complete your verification.",
            )

        customer_id = generate_customer_id()
        verification = await self._verifications.create_request({
            "customer_id": customer_id,
            "name": str(params["name"]).strip(),
            "phone": phone,
            "email": email,
        })
        self._logger.info(
            "registration_initiated",
            verification_id=verification["request_id"],
            customer_id=customer_id,
        )

        return self.success_response(
            data={
                "requestId": verification["request_id"],
                "customerId": customer_id,
                "phone": phone,
                "email": email,
                "otpSent": True,
                "emailSent": True,
            },
            message=(
                f"Great! I've sent a 6-digit verification code to your WhatsApp ({phone}) "
                f"and a verification link to {email}. "
                "Please enter the code to verify your phone number."
            ),
        )

    async def _handle_verify_phone(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        verification_id = str(params["requestId"])
        if await self._verifications.get_request(verification_id) is None:
            return self.error_response(ResponseStatus.NOT_FOUND, REQUEST_NOT_FOUND)

        if not await self._verifications.verify_otp(verification_id, str(params["otp"])):
            return self.error_response(
                ResponseStatus.ERROR, "Invalid or expired verification code. Please try again."
            )

        status = _verification_status(await self._verifications.get_request(verification_id))
        if status["canComplete"]:
            message = (
                "Phone verified! Both phone and email are verified. "
                "You can now set your password to complete registration."
            )
        else:
            message = "Phone verified! Please also verify your email to complete registration."
        return self.success_response(data=status, message=message)

    async def _handle_verify_email(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        verification = await self._verifications.verify_email_token(str(params["token"]))
        if verification is None:
            return self.error_response(
                ResponseStatus.ERROR, "Invalid or expired verification link."
            )

        status = _verification_status(verification)
        if status["canComplete"]:
            message = (
                "Email verified! Both phone and email are verified. "
                "You can now set your password to complete registration."
            )
        else:
            message = "Email verified! Please also verify your phone to complete registration."
        return self.success_response(data=status, message=message)

    async def _handle_resend_otp(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        verification_id = str(params["requestId"])
        verification = await self._verifications.get_request(verification_id)
        if verification is None:
            return self.error_response(ResponseStatus.NOT_FOUND, REQUEST_NOT_FOUND)
        if verification.get("whatsapp_verified"):
            return self.success_response(
                data={"alreadyVerified": True}, message="Your phone is already verified!"
            )

        await self._verifications.regenerate_otp(verification_id)
        self._logger.info("verification_otp_resent", verification_id=verification_id)
        return self.success_response(
            data={"otpSent": True},
            message=(
                "I've sent a new verification code to your WhatsApp. "
                "Please check and enter it here."
            ),
        )

    async def _handle_resend_email(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        verification_id = str(params["requestId"])
        verification = await self._verifications.get_request(verification_id)
        if verification is None:
            return self.error_response(ResponseStatus.NOT_FOUND, REQUEST_NOT_FOUND)
        if verification.get("email_verified"):
            return self.success_response(
                data={"alreadyVerified": True}, message="Your email is already verified!"
            )

        await self._verifications.regenerate_email_token(verification_id)
        self._logger.info("verification_email_resent", verification_id=verification_id)
        return self.success_response(
            data={"emailSent": True},
            message=(
                "I've sent a new verification link to your email. "
                "Please check your inbox (and spam folder)."
            ),
        )

    async def _handle_complete(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        verification_id = str(params["requestId"])
        verification = await self._verifications.get_request(verification_id)
        if verification is None:
            return self.error_response(ResponseStatus.NOT_FOUND, REQUEST_NOT_FOUND)
        if verification.get("completed"):
            return self.error_response(
                ResponseStatus.ERROR,
                "This registration is already complete. Please log in instead.",
            )

        missing = []
        if not verification.get("whatsapp_verified"):
            missing.append("phone")
        if not verification.get("email_verified"):
            missing.append("email")
        if missing:
            return self.error_response(
                ResponseStatus.ERROR,
                f"Please verify your {' and '.join(missing)} before completing registration.",
            )

        password = str(params["password"])
        problem = password_problem(password)
        if problem is not None:
            return self.error_response(ResponseStatus.ERROR, problem)

        customer_id = await self._customers.create_customer({
            "customer_id": verification.get("customer_id"),
            "name": verification["name"],
            "phone": verification["phone"],
            "email": verification["email"],
            "password_hash": hash_password(password),
        })
        await self._verifications.mark_completed(verification_id)
        self._logger.info(
            "registration_completed",
            verification_id=verification_id,
            customer_id=customer_id,
        )

        return self.success_response(
            data={
                "customerId": customer_id,
                "email": verification["email"],
                "phone": verification["phone"],
                "name": verification["name"],
                "registrationComplete": True,
            },
            message=(
                f"Welcome to Lorenzo Dry Cleaners, {verification['name']}! "
                "Your account is now ready. You can log in and schedule your first pickup."
            ),
        )

    async def _handle_status(self, params: dict[str, Any], auth: AuthContext) -> AgentResponse:
        verification = await self._verifications.get_request(str(params["requestId"]))
        if verification is None:
            return self.error_response(ResponseStatus.NOT_FOUND, REQUEST_NOT_FOUND)

        status = _verification_status(verification)
        if status["canComplete"]:
            message = "Both phone and email are verified! You can now set your password."
        elif status["phoneVerified"]:
            message = "Phone verified. Please check your email to complete verification."
        elif status["emailVerified"]:
            message = "Email verified. Please enter the WhatsApp code to complete verification."
        else:
            message = "Please verify both your phone and email to continue."
        return self.success_response(data=status, message=message)

    async def _handle_check_existing(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        result: dict[str, Any] = {"phoneExists": False, "emailExists": False}

        if params.get("phone"):
            phone = normalize_phone(str(params["phone"]))
            if phone is not None:
                result["phoneExists"] = await self._customers.get_by_phone(phone) is not None
                result["phone"] = phone

        if params.get("email"):
            email = normalize_email(str(params["email"]))
            result["emailExists"] = await self._customers.get_by_email(email) is not None
            result["email"] = email

        return self.success_response(data=result)

    # ── Account ──────────────────────────────────────────────────────────────

    async def _handle_update_profile(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        customer = await self._customers.get_customer(auth.customer_id)
        if customer is None:
            return self.error_response(ResponseStatus.ERROR, "Customer not found.")

        updates: dict[str, Any] = {}
        if isinstance(params.get("name"), str) and params["name"].strip():
            updates["name"] = params["name"].strip()
        if isinstance(params.get("email"), str):
            email = normalize_email(params["email"])
            if is_valid_email(email):
                updates["email"] = email

        if not updates:
            return self.success_response(
                data={"customer": summarize_customer(customer)}, message="No changes to update."
            )

        updated = await self._customers.update_customer(auth.customer_id, updates)
        self._logger.info(
            "profile_updated", customer_id=auth.customer_id, fields=sorted(updates)
        )
        return self.success_response(
            data={"customer": summarize_customer(updated or {**customer, **updates})},
            message="Your profile has been updated successfully!",
        )

    async def _handle_password_reset(
        self, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        # The reply never reveals whether the address has an account.
        self._logger.info("password_reset_requested")
        return self.success_response(
            data={"emailSent": True},
            message=(
                "If an account exists with this email, "
                "you'll receive a password reset link shortly."
            ),
        )


def _verification_status(verification: dict[str, Any]) -> dict[str, Any]:
    phone_verified = bool(verification.get("whatsapp_verified"))
    email_verified = bool(verification.get("email_verified"))
    return {
        "requestId": verification.get("request_id"),
        "phoneVerified": phone_verified,
        "emailVerified": email_verified,
        "canComplete": phone_verified and email_verified,
    }
