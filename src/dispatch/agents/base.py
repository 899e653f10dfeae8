"""Base agent abstractions for the dispatch layer.

Defines the request/response envelope every agent speaks, the capability
declaration each agent publishes, and the abstract BaseAgent whose
process_request() wraps the agent's handle() with capability lookup,
authorization, parameter validation, fault conversion, and timing logs.

These types are consumed by the AgentRouter (router.py) for registration,
envelope validation, and capability discovery.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from src.dispatch.core.auth import (
    AuthContext,
    StaffRole,
    UserType,
    can_access_branch,
    has_management_access,
    has_staff_access,
)

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Response Status ─────────────────────────────────────────────────────────


class ResponseStatus(str, Enum):
    """Outcome of a single agent request."""

    SUCCESS = "success"
    ERROR = "error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"


# ── Agent Capability ────────────────────────────────────────────────────────


@dataclass
class AgentCapability:
    """One callable action an agent exposes, with its access rules.

    Capabilities are read only by the owning agent's process_request(); the
    router never inspects them, which keeps it agent-agnostic.

    Attributes:
        action: Action key, unique within an agent (e.g., "getOrderStatus").
        description: Human-readable description used for help text and
            capability discovery.
        required_params: Parameter names that must be present and not None.
        optional_params: Parameter names the action understands but does not
            require.
        requires_auth: Reject guest callers when True.
        allowed_user_types: Caller types allowed to invoke the action. Empty
            means unrestricted.
        allowed_staff_roles: Staff roles allowed to invoke the action. When
            set, the caller must be staff with one of these roles.
        input_schema: Optional Pydantic model the params are validated
            against before reaching handle().
    """

    action: str
    description: str
    required_params: list[str] = field(default_factory=list)
    optional_params: list[str] = field(default_factory=list)
    requires_auth: bool = False
    allowed_user_types: list[UserType] = field(default_factory=list)
    allowed_staff_roles: list[StaffRole] = field(default_factory=list)
    input_schema: type[BaseModel] | None = None


# ── Request / Response Envelope ─────────────────────────────────────────────


class AgentRequest(BaseModel):
    """A single invocation of one agent action.

    Envelope fields default to empty values so the router, not the model,
    reports what is missing.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    request_id: str = ""
    from_agent: str = "system"
    to_agent: str = ""
    action: str = ""
    params: dict[str, Any] = Field(default_factory=dict)
    auth: AuthContext | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


class AgentResponse(BaseModel):
    """Result of one agent request.

    ``error`` is present exactly when ``status`` is not success. ``message``
    is an optional human-readable summary suitable for direct display.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    request_id: str = ""
    from_agent: str
    status: ResponseStatus
    data: Any = None
    error: str | None = None
    message: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_error_matches_status(self) -> AgentResponse:
        if self.status == ResponseStatus.SUCCESS and self.error is not None:
            raise ValueError("success responses must not carry an error")
        if self.status != ResponseStatus.SUCCESS and not self.error:
            raise ValueError(f"{self.status.value} responses must carry an error")
        return self

    @property
    def ok(self) -> bool:
        return self.status == ResponseStatus.SUCCESS


# ── Display Formatting ──────────────────────────────────────────────────────


def format_currency(amount: float | int) -> str:
    """Format an amount in Kenyan Shillings, e.g. ``KES 1,250``."""
    value = int(amount) if float(amount).is_integer() else round(float(amount), 2)
    return f"KES {value:,}"


def format_date(value: date) -> str:
    """Format a date as ``Mon, 6 Jan 2025``."""
    return f"{value:%a}, {value.day} {value:%b %Y}"


def format_time(value: datetime) -> str:
    return f"{value:%H:%M}"


def format_datetime(value: datetime) -> str:
    return f"{format_date(value)} at {format_time(value)}"


def to_iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ())) or "params"
        parts.append(f"{location}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


# ── Base Agent ──────────────────────────────────────────────────────────────


class BaseAgent(ABC):
    """Abstract base class for every agent reachable through the router.

    Provides a consistent contract with:
    - Declarative capabilities (action, params, access rules)
    - process_request() as the single external entry point
    - Response helpers so every agent builds responses the same way
    - Auth predicates and display formatting shared by all agents

    Subclasses set ``name``, ``description`` and ``capabilities`` and
    implement handle(). External callers (the router) use process_request(),
    which never raises.
    """

    name: str = ""
    description: str = ""
    capabilities: list[AgentCapability] = []

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__).bind(agent=self.name)

    @abstractmethod
    async def handle(
        self, action: str, params: dict[str, Any], auth: AuthContext
    ) -> AgentResponse:
        """Run the agent's business logic for an already-validated action.

        Called only by process_request(), after capability, authorization and
        parameter checks have passed. May delegate sub-work to other agents
        through the router.

        Args:
            action: The capability action being invoked.
            params: Request parameters (typed values merged in when the
                capability declares an input_schema).
            auth: The caller's auth context.

        Returns:
            An AgentResponse built with success_response()/error_response().
        """
        ...

    async def process_request(self, request: AgentRequest) -> AgentResponse:
        """Validate and execute a request, converting every fault to a response.

        Order of checks, short-circuiting on the first failure:
        1. Capability lookup (not_found for unknown actions)
        2. Authorization against the capability's access rules
        3. Required parameters, then typed parameter validation
        4. handle(), with any exception converted to an error response

        The returned response always carries the request's ``request_id``
        and this agent's name as ``from_agent``.
        """
        start_time = time.monotonic()
        response = await self._process(request)
        response = response.model_copy(
            update={"request_id": request.request_id, "from_agent": self.name}
        )
        self._logger.info(
            "agent_request_processed",
            action=request.action,
            status=response.status.value,
            elapsed_ms=round((time.monotonic() - start_time) * 1000, 2),
        )
        return response

    async def _process(self, request: AgentRequest) -> AgentResponse:
        capability = self.get_capability(request.action)
        if capability is None:
            return self.error_response(
                ResponseStatus.NOT_FOUND, f"Unknown action: {request.action}"
            )

        auth = request.auth
        if auth is None:
            return self.error_response(
                ResponseStatus.UNAUTHORIZED, "Missing authentication context"
            )

        denial = self._check_authorization(capability, auth)
        if denial is not None:
            return self.error_response(ResponseStatus.UNAUTHORIZED, denial)

        params = dict(request.params)
        for param_name in capability.required_params:
            if params.get(param_name) is None:
                return self.error_response(
                    ResponseStatus.ERROR, f"Missing required parameter: {param_name}"
                )

        if capability.input_schema is not None:
            try:
                typed = capability.input_schema.model_validate(params)
            except ValidationError as exc:
                return self.error_response(
                    ResponseStatus.ERROR,
                    f"Invalid parameters for {capability.action}: {_describe_validation_error(exc)}",
                )
            params.update(typed.model_dump(by_alias=True))

        try:
            return await self.handle(capability.action, params, auth)
        except Exception as exc:
            self._logger.error(
                "agent_handler_failed",
                action=capability.action,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            return self.error_response(ResponseStatus.ERROR, str(exc) or type(exc).__name__)

    def _check_authorization(
        self, capability: AgentCapability, auth: AuthContext
    ) -> str | None:
        """Return a denial reason, or None when the caller may proceed."""
        if capability.requires_auth and auth.user_type == UserType.GUEST:
            return "Please log in to use this feature."

        if capability.allowed_user_types and auth.user_type not in capability.allowed_user_types:
            return f"This action is not available for {auth.user_type.value} users."

        if capability.allowed_staff_roles:
            if not has_staff_access(auth) or auth.staff_role not in capability.allowed_staff_roles:
                return "You do not have permission to perform this action."

        return None

    def get_capability(self, action: str) -> AgentCapability | None:
        for capability in self.capabilities:
            if capability.action == action:
                return capability
        return None

    # ── Response Helpers ────────────────────────────────────────────────────

    def success_response(self, data: Any = None, message: str | None = None) -> AgentResponse:
        return AgentResponse(
            from_agent=self.name,
            status=ResponseStatus.SUCCESS,
            data=data,
            message=message,
        )

    def error_response(
        self, status: ResponseStatus, error: str, data: Any = None
    ) -> AgentResponse:
        return AgentResponse(
            from_agent=self.name,
            status=status,
            error=error,
            data=data,
        )

    # ── Auth Predicates ─────────────────────────────────────────────────────

    @staticmethod
    def is_staff(auth: AuthContext) -> bool:
        return has_staff_access(auth)

    @staticmethod
    def is_management(auth: AuthContext) -> bool:
        return has_management_access(auth)

    @staticmethod
    def can_access_branch(auth: AuthContext, branch_id: str) -> bool:
        return can_access_branch(auth, branch_id)

    @staticmethod
    def scoped_customer_id(params: dict[str, Any], auth: AuthContext) -> str | None:
        """Customers always act on themselves; other callers must name a customer."""
        if auth.user_type == UserType.CUSTOMER:
            return auth.customer_id
        return params.get("customerId")

    # ── Formatting ──────────────────────────────────────────────────────────

    format_currency = staticmethod(format_currency)
    format_date = staticmethod(format_date)
    format_time = staticmethod(format_time)
    format_datetime = staticmethod(format_datetime)

    def to_routing_info(self) -> dict[str, Any]:
        """Serialize agent identity and actions for capability discovery."""
        return {
            "agent": self.name,
            "description": self.description,
            "capabilities": [
                {"action": c.action, "description": c.description}
                for c in self.capabilities
            ],
        }
