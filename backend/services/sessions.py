"""Per-browser-session cache registry.

Each browsing session (identified by the ``catalog_session`` cookie) gets its
own cache over its own MemoryStore, so one visitor never sees another's
cached pages. With caching disabled every session shares a NullStore cache.

Note: the registry lives in process memory. Each uvicorn worker keeps its own,
so a session routed to a different worker simply starts cold.
"""

import logging
import secrets
import time
from typing import Callable

from fastapi import Request

from config import settings
from services.cache import ExpiringKeyValueCache
from services.session_store import MemoryStore, NullStore

logger = logging.getLogger(__name__)

SESSION_COOKIE = "catalog_session"


def new_session_id() -> str:
    return secrets.token_urlsafe(16)


class SessionRegistry:
    def __init__(
        self,
        enabled: bool = True,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
        quota_bytes: int | None = None,
    ):
        self.enabled = enabled
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        self.clock = clock
        self.quota_bytes = quota_bytes
        self._caches: dict[str, ExpiringKeyValueCache] = {}
        self._last_seen: dict[str, float] = {}
        self._disabled = ExpiringKeyValueCache(NullStore(), clock=clock, ttl_seconds=self.ttl_seconds)

    def cache_for(self, session_id: str) -> ExpiringKeyValueCache:
        if not self.enabled:
            return self._disabled
        now = self.clock()
        self.prune(now)
        cache = self._caches.get(session_id)
        if cache is None:
            logger.debug("Starting session cache %s", session_id[:8])
            cache = ExpiringKeyValueCache(
                MemoryStore(quota_bytes=self.quota_bytes),
                clock=self.clock,
                ttl_seconds=self.ttl_seconds,
            )
            self._caches[session_id] = cache
        self._last_seen[session_id] = now
        return cache

    def prune(self, now: float | None = None) -> int:
        """Drop sessions idle for at least one TTL; every entry they held has expired."""
        if now is None:
            now = self.clock()
        idle = [sid for sid, seen in self._last_seen.items() if now - seen >= self.ttl_seconds]
        for session_id in idle:
            self.end(session_id)
        if idle:
            logger.debug("Dropped %d idle session caches", len(idle))
        return len(idle)

    def end(self, session_id: str) -> None:
        self._caches.pop(session_id, None)
        self._last_seen.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._caches)


sessions = SessionRegistry(enabled=settings.cache_enabled)


def session_cache(request: Request) -> ExpiringKeyValueCache:
    """FastAPI dependency: the cache belonging to the caller's session."""
    return sessions.cache_for(request.state.session_id)
