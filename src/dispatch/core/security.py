"""JWT authentication and password hashing.

Provides the security primitives used by the HTTP edge to turn a bearer
token into an AuthContext, and by onboarding to hash customer passwords.

Uses bcrypt directly (not passlib) for Python 3.13 compatibility.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError, jwt

from src.dispatch.config import get_settings
from src.dispatch.core.auth import (
    AuthContext,
    UserType,
    create_customer_auth,
    create_guest_auth,
    create_staff_auth,
)

# ── Password Hashing ──────────────────────────────────────────────────────────


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against its bcrypt hash."""
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


# ── JWT Token Creation ────────────────────────────────────────────────────────


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token carrying caller identity claims.

    The data dict should contain:
    - sub: customer or staff id (str)
    - user_type: "customer" or "staff"
    - staff_role, branch_id, branch_access: staff tokens only
    """
    settings = get_settings()
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": now, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# ── JWT Token Verification ────────────────────────────────────────────────────


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> dict:
    """Decode and validate an access token.

    Raises:
        HTTPException(401): If the token is invalid, expired, not an access
            token, or has no subject.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        raise _credentials_exception()
    if payload.get("type") != "access" or not payload.get("sub"):
        raise _credentials_exception()
    return payload


def auth_context_from_claims(claims: dict[str, Any] | None, session_id: str) -> AuthContext:
    """Map verified token claims (or no token) onto an AuthContext.

    No claims means an anonymous guest for the given session. Claims that
    name an unknown user type or an unknown staff role are rejected with 401.
    """
    if not claims:
        return create_guest_auth(session_id)

    try:
        user_type = UserType(claims.get("user_type", UserType.CUSTOMER.value))
        if user_type == UserType.STAFF:
            return create_staff_auth(
                staff_id=claims["sub"],
                staff_role=claims.get("staff_role", ""),
                branch_id=claims.get("branch_id", ""),
                session_id=session_id,
                branch_access=claims.get("branch_access") or [],
            )
        if user_type == UserType.CUSTOMER:
            return create_customer_auth(claims["sub"], session_id)
    except (KeyError, ValueError):
        raise _credentials_exception()
    return create_guest_auth(session_id)
