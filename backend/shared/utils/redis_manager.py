"""
Redis connection manager for match validation.
Provides the async connection pool and key namespace utilities for stored results.
"""
from __future__ import annotations

from typing import Any, Optional

import redis.asyncio as aioredis
from redis.asyncio import Redis

from shared.config import Settings, get_settings
from shared.utils.logging import get_logger

logger = get_logger(__name__)

# ── Key namespaces ──────────────────────────────────────────────────────
RESULT_KEY = "validation:result:{result_id}"
EVENT_INDEX_KEY = "validation:event:{event_key}"


def _fmt(template: str, **kwargs: Any) -> str:
    return template.format(**kwargs)


def result_key(result_id: str) -> str:
    return _fmt(RESULT_KEY, result_id=result_id)


def event_index_key(event_key: str) -> str:
    return _fmt(EVENT_INDEX_KEY, event_key=event_key)


class RedisManager:
    """Manages the async Redis connection pool."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._pool: Optional[Redis] = None

    async def connect(self) -> None:
        """Initialize the connection pool."""
        self._pool = aioredis.from_url(
            self._settings.redis_url_str,
            max_connections=self._settings.redis_max_connections,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
            retry_on_timeout=True,
        )
        # Verify
        await self._pool.ping()
        logger.info("redis_connected", url=self._settings.redis_url_str)

    async def disconnect(self) -> None:
        """Graceful shutdown."""
        if self._pool:
            await self._pool.aclose()
            self._pool = None
            logger.info("redis_disconnected")

    @property
    def client(self) -> Redis:
        if self._pool is None:
            raise RuntimeError("RedisManager not connected. Call connect() first.")
        return self._pool
