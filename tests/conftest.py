"""Shared fixtures for the dispatch test suite.

Provides:
- Auth contexts for each caller type (guest, customer, staff roles)
- A completion service double with is_configured() switchable
- Settings cache reset so env overrides take effect per test
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dispatch.config import get_settings
from src.dispatch.core.auth import (
    AuthContext,
    StaffRole,
    create_customer_auth,
    create_guest_auth,
    create_staff_auth,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def guest_auth() -> AuthContext:
    return create_guest_auth("sess-guest")


@pytest.fixture
def customer_auth() -> AuthContext:
    return create_customer_auth("CUST-001", "sess-cust")


@pytest.fixture
def store_manager_auth() -> AuthContext:
    return create_staff_auth("STF-010", StaffRole.STORE_MANAGER, "KILIMANI", "sess-mgr")


@pytest.fixture
def front_desk_auth() -> AuthContext:
    return create_staff_auth("STF-020", StaffRole.FRONT_DESK, "KILIMANI", "sess-desk")


@pytest.fixture
def driver_auth() -> AuthContext:
    return create_staff_auth("DRV-001", StaffRole.DRIVER, "KILIMANI", "sess-drv")


@pytest.fixture
def admin_auth() -> AuthContext:
    return create_staff_auth("STF-001", StaffRole.ADMIN, "MAIN", "sess-admin")


def make_completion_service(configured: bool = True, reply: str = "Sure thing!") -> MagicMock:
    """Completion service double whose async methods return canned text."""
    service = MagicMock()
    service.is_configured.return_value = configured
    service.generate_response = AsyncMock(return_value=reply)
    service.generate_data_response = AsyncMock(return_value=reply)
    service.chat_completion = AsyncMock(return_value=reply)
    service.classify_intent = AsyncMock(
        return_value={"intent": "UNKNOWN", "confidence": 0.5, "entities": {}}
    )
    return service


@pytest.fixture
def completion_factory():
    """Factory for completion service doubles: ``completion_factory(configured=False)``."""
    return make_completion_service
