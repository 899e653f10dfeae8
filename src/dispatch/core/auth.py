"""Caller identity carried through every agent request.

The AuthContext is built once at the edge (HTTP dependency, staff tooling,
or one of the builder functions below) and threaded unchanged through the
router, the handler contract, and any sub-requests the orchestrator makes.
Handlers never mutate it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# ── Identity Enums ──────────────────────────────────────────────────────────


class UserType(str, Enum):
    GUEST = "guest"
    CUSTOMER = "customer"
    STAFF = "staff"


class StaffRole(str, Enum):
    ADMIN = "admin"
    DIRECTOR = "director"
    GENERAL_MANAGER = "general_manager"
    STORE_MANAGER = "store_manager"
    WORKSTATION_MANAGER = "workstation_manager"
    WORKSTATION_STAFF = "workstation_staff"
    SATELLITE_STAFF = "satellite_staff"
    FRONT_DESK = "front_desk"
    DRIVER = "driver"


MANAGEMENT_ROLES: list[StaffRole] = [
    StaffRole.ADMIN,
    StaffRole.DIRECTOR,
    StaffRole.GENERAL_MANAGER,
    StaffRole.STORE_MANAGER,
]

EXECUTIVE_ROLES: list[StaffRole] = [StaffRole.ADMIN, StaffRole.DIRECTOR]


# ── Auth Context ────────────────────────────────────────────────────────────


class AuthContext(BaseModel):
    """Immutable caller identity and scope for one request.

    Fields must agree with ``user_type``: guests carry no customer or staff
    identifiers, customers carry no staff fields. ``session_id`` is always
    present and identifies the logical conversation regardless of user type.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    user_type: UserType
    session_id: str = ""
    customer_id: str | None = None
    staff_id: str | None = None
    staff_role: StaffRole | None = None
    branch_id: str | None = None
    branch_access: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_consistency(self) -> AuthContext:
        has_staff_fields = bool(self.staff_id or self.staff_role or self.branch_id or self.branch_access)
        if self.user_type == UserType.GUEST and (self.customer_id or has_staff_fields):
            raise ValueError("guest auth must not carry customer or staff identifiers")
        if self.user_type == UserType.CUSTOMER and has_staff_fields:
            raise ValueError("customer auth must not carry staff fields")
        if self.user_type == UserType.STAFF and self.customer_id:
            raise ValueError("staff auth must not carry a customer id")
        return self


# ── Builders ────────────────────────────────────────────────────────────────


def create_guest_auth(session_id: str) -> AuthContext:
    """Build the auth context for an anonymous website visitor."""
    return AuthContext(user_type=UserType.GUEST, session_id=session_id)


def create_customer_auth(customer_id: str, session_id: str) -> AuthContext:
    """Build the auth context for a logged-in customer."""
    return AuthContext(
        user_type=UserType.CUSTOMER,
        customer_id=customer_id,
        session_id=session_id,
    )


def create_staff_auth(
    staff_id: str,
    staff_role: StaffRole | str,
    branch_id: str,
    session_id: str,
    branch_access: list[str] | None = None,
) -> AuthContext:
    """Build the auth context for a staff member working from a branch."""
    return AuthContext(
        user_type=UserType.STAFF,
        staff_id=staff_id,
        staff_role=StaffRole(staff_role),
        branch_id=branch_id,
        branch_access=list(branch_access or []),
        session_id=session_id,
    )


# ── Predicates ──────────────────────────────────────────────────────────────


def has_staff_access(auth: AuthContext) -> bool:
    """True for staff callers that carry a staff id."""
    return auth.user_type == UserType.STAFF and bool(auth.staff_id)


def has_management_access(auth: AuthContext) -> bool:
    """True for staff callers holding one of the management roles."""
    if not has_staff_access(auth):
        return False
    return auth.staff_role in MANAGEMENT_ROLES


def is_executive(auth: AuthContext) -> bool:
    return auth.staff_role in EXECUTIVE_ROLES


def can_access_branch(auth: AuthContext, branch_id: str) -> bool:
    """Whether a staff caller may see data for ``branch_id``.

    Admins and directors see every branch. Everyone else sees their own
    branch plus any extra branches listed in ``branch_access``.
    """
    if not has_staff_access(auth):
        return False
    if is_executive(auth):
        return True
    if auth.branch_id == branch_id:
        return True
    return branch_id in auth.branch_access
