"""Session-scoped expiring cache for upstream listing and detail payloads.

Entries are JSON strings in a backing store (see services/session_store.py),
each with a fixed TTL. Expired entries are dropped when read. The cache is an
optimization layer only: every failure is logged and degrades to a miss.
"""

import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from services.session_store import SessionStore

logger = logging.getLogger(__name__)

CARS_LIST = "cars_list"
CAR_DETAILS = "car_details"
CACHE_KEYS = (CARS_LIST, CAR_DETAILS)

CACHE_DURATION_SECONDS = 10 * 60

Params = Mapping[str, Any] | None


@dataclass
class CacheEntry:
    payload: Any
    created_at: float
    expires_at: float

    def to_json(self) -> str:
        return json.dumps(
            {"payload": self.payload, "created_at": self.created_at, "expires_at": self.expires_at}
        )

    @classmethod
    def from_json(cls, raw: str) -> "CacheEntry":
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Cache entry is not an object: {type(data).__name__}")
        created_at = float(data["created_at"])
        expires_at = float(data["expires_at"])
        if not (math.isfinite(created_at) and math.isfinite(expires_at)):
            raise ValueError("Cache entry timestamps must be finite")
        return cls(payload=data["payload"], created_at=created_at, expires_at=expires_at)


def _escape(value: Any) -> str:
    return str(value).replace("\\", "\\\\").replace("|", "\\|").replace(":", "\\:")


def canonical_key(namespace: str, params: Params = None) -> str:
    """Build the store key for a namespace and parameter set.

    Params are sorted by name so insertion order never matters. ``None``
    values are skipped, and empty params collapse to the bare namespace.
    Separators inside names and values are backslash-escaped so distinct
    param sets never share a key.
    """
    if not params:
        return namespace
    parts = [f"{_escape(k)}:{_escape(v)}" for k, v in sorted(params.items()) if v is not None]
    if not parts:
        return namespace
    return f"{namespace}_{'|'.join(parts)}"


class ExpiringKeyValueCache:
    def __init__(
        self,
        store: SessionStore,
        clock: Callable[[], float] = time.time,
        ttl_seconds: float = CACHE_DURATION_SECONDS,
        namespaces: Iterable[str] = CACHE_KEYS,
    ):
        self.store = store
        self.clock = clock
        self.ttl_seconds = ttl_seconds
        self._namespaces = set(namespaces)

    @property
    def enabled(self) -> bool:
        return self.store.available

    @property
    def namespaces(self) -> frozenset[str]:
        return frozenset(self._namespaces)

    def set(self, namespace: str, params: Params, value: Any) -> None:
        if not self.enabled:
            return
        self._namespaces.add(namespace)
        key = canonical_key(namespace, params)
        now = self.clock()
        entry = CacheEntry(payload=value, created_at=now, expires_at=now + self.ttl_seconds)
        try:
            self.store.put(key, entry.to_json())
        except Exception as e:
            logger.warning("Failed to cache %s: %s", key, e)

    def get(self, namespace: str, params: Params = None) -> Any | None:
        if not self.enabled:
            return None
        key = canonical_key(namespace, params)
        try:
            raw = self.store.get(key)
            if raw is None:
                logger.debug("Cache miss: %s", key)
                return None
            entry = CacheEntry.from_json(raw)
        except Exception as e:
            logger.warning("Failed to read %s from cache: %s", key, e)
            return None

        if self.clock() >= entry.expires_at:
            logger.debug("Cache entry expired: %s", key)
            self._delete(key)
            return None

        logger.debug("Cache hit: %s", key)
        return entry.payload

    def remove(self, namespace: str, params: Params = None) -> None:
        if not self.enabled:
            return
        self._delete(canonical_key(namespace, params))

    def clear(self) -> None:
        """Remove every entry under a known namespace; other keys survive."""
        if not self.enabled:
            return
        try:
            doomed = [k for k in self.store.keys() if self._owns(k)]
        except Exception as e:
            logger.warning("Failed to list cache keys: %s", e)
            return
        for key in doomed:
            self._delete(key)

    def _owns(self, key: str) -> bool:
        return any(key == ns or key.startswith(f"{ns}_") for ns in self._namespaces)

    def _delete(self, key: str) -> None:
        try:
            self.store.delete(key)
        except Exception as e:
            logger.warning("Failed to remove %s from cache: %s", key, e)

    # Listing pages are keyed by their full filter set
    def set_cars_list(self, filters: Mapping[str, Any], data: Any) -> None:
        self.set(CARS_LIST, filters, data)

    def get_cars_list(self, filters: Mapping[str, Any]) -> Any | None:
        return self.get(CARS_LIST, filters)

    def set_car_details(self, lot: str, domain: str, data: Any) -> None:
        self.set(CAR_DETAILS, {"lot": lot, "domain": domain}, data)

    def get_car_details(self, lot: str, domain: str) -> Any | None:
        return self.get(CAR_DETAILS, {"lot": lot, "domain": domain})
