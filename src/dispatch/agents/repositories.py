"""Repository protocols the specialist agents depend on.

Agents receive these collaborators by constructor injection and never know
the storage behind them. Every method returns plain dict records with
snake_case keys, or None when the record does not exist; "not found" is a
normal outcome, not an exception. Datetimes in records are timezone-aware
UTC.

Record shapes (keys an agent reads; extra keys are ignored):

- order: order_id, customer_id, customer_name, branch_id, status,
  total_amount, paid_amount, payment_status, garments, estimated_completion,
  created_at, collection_method, return_method, delivery_address,
  special_instructions. Each garment: garment_id, type, color, brand,
  services, price, status, special_instructions.
- customer: customer_id, name, phone, email, order_count, total_spent,
  created_at, addresses, preferences.
- pricing: garment_type, services {wash, dry_clean, iron, starch}.
- pickup: request_id, customer_id, customer_name, customer_phone,
  service_types, item_description, express_service, pickup_address
  {address, coordinates}, preferred_date, time_slot, status,
  assigned_driver_id, assigned_driver_name, converted_order_id.
- verification: request_id, customer_id, name, phone, email,
  whatsapp_verified, email_verified, completed.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Protocol


class OrderRepository(Protocol):
    """Read access to orders. Lists are newest first."""

    async def get_order(self, order_id: str) -> dict[str, Any] | None: ...
    async def list_by_customer(self, customer_id: str, limit: int) -> list[dict[str, Any]]: ...
    async def list_by_branch(self, branch_id: str, limit: int) -> list[dict[str, Any]]: ...
    async def list_by_status(self, status: str, limit: int) -> list[dict[str, Any]]: ...
    async def list_recent(self, limit: int) -> list[dict[str, Any]]: ...
    async def pipeline_stats(self, branch_id: str) -> dict[str, Any]: ...
    async def today_count(self, branch_id: str) -> int: ...


class CustomerRepository(Protocol):
    async def get_customer(self, customer_id: str) -> dict[str, Any] | None: ...
    async def get_by_phone(self, phone: str) -> dict[str, Any] | None: ...
    async def get_by_email(self, email: str) -> dict[str, Any] | None: ...
    async def search(self, query: str, limit: int) -> list[dict[str, Any]]: ...
    async def top_customers(self, limit: int) -> list[dict[str, Any]]: ...
    async def recent_customers(self, limit: int) -> list[dict[str, Any]]: ...
    async def create_customer(self, customer_data: dict[str, Any]) -> str: ...
    async def update_customer(self, customer_id: str, updates: dict[str, Any]) -> dict[str, Any] | None: ...


class PricingRepository(Protocol):
    async def list_for_branch(self, branch_id: str) -> list[dict[str, Any]]: ...
    async def get_for_garment(self, branch_id: str, garment_type: str) -> dict[str, Any] | None: ...


class PickupRepository(Protocol):
    """Pickup requests and the slot calendar.

    Mutating methods return the updated record, or None when the request
    does not exist.
    """

    async def create_pickup(self, pickup_data: dict[str, Any]) -> str: ...
    async def get_pickup(self, request_id: str) -> dict[str, Any] | None: ...
    async def list_by_customer(self, customer_id: str, limit: int) -> list[dict[str, Any]]: ...
    async def list_by_driver(self, driver_id: str, day: date | None = None) -> list[dict[str, Any]]: ...
    async def list_pending(self, limit: int) -> list[dict[str, Any]]: ...
    async def available_slots(self, day: date) -> list[str]: ...
    async def update_pickup(self, request_id: str, updates: dict[str, Any]) -> dict[str, Any] | None: ...
    async def stats(self, start: datetime, end: datetime) -> dict[str, Any]: ...


class VerificationRepository(Protocol):
    """Pending registrations and their phone/email verification state.

    Implementations deliver codes themselves: create_request and the
    regenerate_* methods send the WhatsApp OTP and the email link.
    verify_email_token returns the verified request record, or None for an
    unknown or expired token.
    """

    async def create_request(self, request_data: dict[str, Any]) -> dict[str, Any]: ...
    async def get_request(self, request_id: str) -> dict[str, Any] | None: ...
    async def get_pending_by_phone(self, phone: str) -> dict[str, Any] | None: ...
    async def verify_otp(self, request_id: str, otp: str) -> bool: ...
    async def verify_email_token(self, token: str) -> dict[str, Any] | None: ...
    async def regenerate_otp(self, request_id: str) -> str: ...
    async def regenerate_email_token(self, request_id: str) -> str: ...
    async def mark_completed(self, request_id: str) -> None: ...


class AnalyticsRepository(Protocol):
    """Aggregates for business analytics.

    ``branch_ids`` of None means every branch. Record shapes:

    - transaction_totals: total, count, by_method.
    - today_transaction_summary: total, count, mpesa, card, credit.
    - top_performers: employee_id, employee_name, rank, overall_score.
    - branch_performance: branch_id, name, revenue, orders_today,
      efficiency; highest revenue first.
    - satisfaction_metrics: score (out of 5) plus any breakdown.
    """

    async def transaction_totals(
        self, start: datetime, end: datetime, branch_ids: list[str] | None
    ) -> dict[str, Any]: ...
    async def today_transaction_summary(self) -> dict[str, Any]: ...
    async def orders_count(
        self, start: datetime, end: datetime, branch_ids: list[str] | None
    ) -> int: ...
    async def completed_count(
        self, start: datetime, end: datetime, branch_ids: list[str] | None
    ) -> int: ...
    async def revenue(
        self, start: datetime, end: datetime, branch_ids: list[str] | None
    ) -> float: ...
    async def pipeline_stats(self, branch_id: str) -> dict[str, Any]: ...
    async def top_customers(self, limit: int) -> list[dict[str, Any]]: ...
    async def top_performers(self, branch_id: str, limit: int) -> list[dict[str, Any]]: ...
    async def branch_performance(self, branch_id: str | None = None) -> list[dict[str, Any]]: ...
    async def deliveries_count(
        self, branch_ids: list[str] | None, status: str | None = None
    ) -> int: ...
    async def satisfaction_metrics(self, branch_id: str | None = None) -> dict[str, Any]: ...
