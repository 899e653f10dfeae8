"""FastAPI dependencies for the caller's auth context and the agent router.

The auth context is built once here, at the edge, and threaded unchanged
through every agent request the call produces.
"""

from __future__ import annotations

from fastapi import Request

from src.dispatch.agents.router import AgentRouter, get_agent_router
from src.dispatch.core.auth import AuthContext
from src.dispatch.core.security import auth_context_from_claims, verify_token

SESSION_HEADER = "X-Session-ID"


async def get_auth_context(request: Request) -> AuthContext:
    """Build the caller's AuthContext from the session header and bearer token.

    A request without a bearer token is a guest. A missing session header
    yields an empty session id, which the router rejects as a protocol error.

    Raises:
        HTTPException(401): If a bearer token is present but invalid.
    """
    session_id = request.headers.get(SESSION_HEADER, "")

    claims = None
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        claims = verify_token(auth_header[7:])

    return auth_context_from_claims(claims, session_id)


async def get_router() -> AgentRouter:
    return get_agent_router()
