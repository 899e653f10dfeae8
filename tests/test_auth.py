"""Auth context, predicates, JWT and password hashing tests.

Covers:
- AuthContext builders and field consistency per user type
- Staff, management, executive and branch-access predicates
- Token creation/verification and claims-to-context mapping
- bcrypt password hashing
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import jwt
from pydantic import ValidationError

from src.dispatch.config import get_settings
from src.dispatch.core.auth import (
    AuthContext,
    StaffRole,
    UserType,
    can_access_branch,
    create_customer_auth,
    create_guest_auth,
    create_staff_auth,
    has_management_access,
    has_staff_access,
    is_executive,
)
from src.dispatch.core.security import (
    auth_context_from_claims,
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)


# ── Builders ──────────────────────────────────────────────────────────────────


def test_guest_builder():
    """Guests carry only a session id."""
    auth = create_guest_auth("s1")
    assert auth.user_type == UserType.GUEST
    assert auth.session_id == "s1"
    assert auth.customer_id is None and auth.staff_id is None


def test_staff_builder_accepts_role_string():
    """Staff roles may be given by value and become StaffRole members."""
    auth = create_staff_auth("STF-1", "store_manager", "KILIMANI", "s1", ["WESTLANDS"])
    assert auth.staff_role == StaffRole.STORE_MANAGER
    assert auth.branch_access == ["WESTLANDS"]


def test_inconsistent_contexts_rejected():
    """Identifiers that do not belong to the user type are rejected."""
    with pytest.raises(ValidationError):
        AuthContext(user_type=UserType.GUEST, session_id="s1", customer_id="CUST-1")
    with pytest.raises(ValidationError):
        AuthContext(user_type=UserType.CUSTOMER, session_id="s1", staff_id="STF-1")
    with pytest.raises(ValidationError):
        AuthContext(user_type=UserType.STAFF, session_id="s1", staff_id="STF-1", customer_id="C")


def test_auth_context_is_frozen(customer_auth):
    """Handlers cannot mutate the caller's context."""
    with pytest.raises(ValidationError):
        customer_auth.customer_id = "CUST-OTHER"


# ── Predicates ────────────────────────────────────────────────────────────────


def test_staff_and_management_predicates(customer_auth, front_desk_auth, store_manager_auth):
    assert not has_staff_access(customer_auth)
    assert has_staff_access(front_desk_auth)
    assert not has_management_access(front_desk_auth)
    assert has_management_access(store_manager_auth)


def test_is_executive(admin_auth, store_manager_auth):
    assert is_executive(admin_auth)
    assert not is_executive(store_manager_auth)


def test_can_access_branch():
    """Own branch and listed extra branches are visible; executives see all."""
    manager = create_staff_auth("STF-1", StaffRole.STORE_MANAGER, "KILIMANI", "s1", ["WESTLANDS"])
    director = create_staff_auth("STF-2", StaffRole.DIRECTOR, "MAIN", "s2")

    assert can_access_branch(manager, "KILIMANI")
    assert can_access_branch(manager, "WESTLANDS")
    assert not can_access_branch(manager, "KAREN")
    assert can_access_branch(director, "KAREN")
    assert not can_access_branch(create_customer_auth("CUST-1", "s3"), "KILIMANI")


# ── JWT ───────────────────────────────────────────────────────────────────────


def test_create_and_verify_token():
    """Tokens round-trip with the access type and the caller's claims."""
    token = create_access_token({"sub": "CUST-1", "user_type": "customer"})
    claims = verify_token(token)
    assert claims["sub"] == "CUST-1"
    assert claims["type"] == "access"


def test_verify_token_rejects_expired():
    token = create_access_token({"sub": "CUST-1"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(HTTPException) as exc_info:
        verify_token(token)
    assert exc_info.value.status_code == 401


def test_verify_token_rejects_wrong_type():
    """Tokens not minted as access tokens are refused."""
    settings = get_settings()
    token = jwt.encode(
        {"sub": "CUST-1", "type": "refresh"},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(HTTPException):
        verify_token(token)


def test_verify_token_rejects_garbage():
    with pytest.raises(HTTPException):
        verify_token("not-a-jwt")


def test_claims_to_context():
    """Claims map onto customer or staff contexts; no claims means guest."""
    assert auth_context_from_claims(None, "s1").user_type == UserType.GUEST

    customer = auth_context_from_claims({"sub": "CUST-1", "user_type": "customer"}, "s1")
    assert customer.customer_id == "CUST-1"
    assert customer.session_id == "s1"

    staff = auth_context_from_claims(
        {"sub": "STF-1", "user_type": "staff", "staff_role": "driver", "branch_id": "KAREN"},
        "s2",
    )
    assert staff.staff_role == StaffRole.DRIVER
    assert staff.branch_id == "KAREN"


def test_claims_with_unknown_role_rejected():
    with pytest.raises(HTTPException):
        auth_context_from_claims({"sub": "STF-1", "user_type": "staff", "staff_role": "pilot"}, "s1")


# ── Passwords ─────────────────────────────────────────────────────────────────


def test_password_hashing():
    hashed = hash_password("Secr3tPass")
    assert hashed != "Secr3tPass"
    assert verify_password("Secr3tPass", hashed)
    assert not verify_password("wrong", hashed)
