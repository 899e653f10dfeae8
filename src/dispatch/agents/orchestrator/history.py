"""Conversation history stores for the orchestrator.

History is a list of ``{"role": "user"|"assistant", "content": str}`` dicts
keyed by session id. The orchestrator owns trimming; stores persist whatever
list they are given.
"""

from __future__ import annotations

import json
from typing import Protocol

import redis.asyncio as aioredis
import structlog

logger = structlog.get_logger(__name__)


class HistoryStore(Protocol):
    """Storage interface for per-session conversation history."""

    async def get(self, session_id: str) -> list[dict]: ...

    async def save(self, session_id: str, messages: list[dict]) -> None: ...

    async def delete(self, session_id: str) -> None: ...


class InMemoryHistoryStore:
    """Process-local history. Lost on restart."""

    def __init__(self) -> None:
        self._histories: dict[str, list[dict]] = {}

    async def get(self, session_id: str) -> list[dict]:
        return list(self._histories.get(session_id, []))

    async def save(self, session_id: str, messages: list[dict]) -> None:
        self._histories[session_id] = list(messages)

    async def delete(self, session_id: str) -> None:
        self._histories.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._histories)


class RedisHistoryStore:
    """History kept as a JSON list under ``chat:history:{session_id}``.

    Args:
        redis_client: A redis.asyncio client created with
            ``decode_responses=True``.
        ttl_seconds: Expiry applied on every save. 0 keeps keys until deleted.
    """

    key_prefix = "chat:history:"

    def __init__(self, redis_client: aioredis.Redis, ttl_seconds: int = 0) -> None:
        self._redis = redis_client
        self._ttl = ttl_seconds

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    async def get(self, session_id: str) -> list[dict]:
        raw = await self._redis.get(self._key(session_id))
        if not raw:
            return []
        try:
            messages = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("history_corrupt", session_id=session_id)
            return []
        return messages if isinstance(messages, list) else []

    async def save(self, session_id: str, messages: list[dict]) -> None:
        await self._redis.set(
            self._key(session_id),
            json.dumps(messages),
            ex=self._ttl or None,
        )

    async def delete(self, session_id: str) -> None:
        await self._redis.delete(self._key(session_id))
