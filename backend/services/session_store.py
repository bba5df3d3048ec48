"""Backing key/value string stores for the session cache.

A store exposes four primitives (get, put, delete, keys) plus an
``available`` flag. The cache checks ``available`` instead of guessing
whether it runs somewhere storage exists.
"""

from typing import Iterator, Protocol


class StoreError(Exception):
    """Backing store could not complete an operation."""


class StoreQuotaExceededError(StoreError):
    def __init__(self, key: str, quota_bytes: int):
        super().__init__(f"Writing {key!r} would exceed the {quota_bytes} byte quota")
        self.key = key
        self.quota_bytes = quota_bytes


class SessionStore(Protocol):
    available: bool

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> Iterator[str]: ...


class MemoryStore:
    """Dict-backed store scoped to one browsing session.

    ``quota_bytes`` mimics the size limit of browser session storage: a put
    that would push the total size of keys and values past it raises
    ``StoreQuotaExceededError`` and leaves the store unchanged.
    """

    available = True

    def __init__(self, quota_bytes: int | None = None):
        self._data: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            current = self.size_bytes() - self._item_size(key, self._data.get(key))
            if current + self._item_size(key, value) > self.quota_bytes:
                raise StoreQuotaExceededError(key, self.quota_bytes)
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        # Snapshot so callers may delete while iterating
        return iter(list(self._data))

    def size_bytes(self) -> int:
        return sum(self._item_size(k, v) for k, v in self._data.items())

    @staticmethod
    def _item_size(key: str, value: str | None) -> int:
        if value is None:
            return 0
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class NullStore:
    """Store used when session caching is disabled. Holds nothing."""

    available = False

    def get(self, key: str) -> str | None:
        return None

    def put(self, key: str, value: str) -> None:
        return None

    def delete(self, key: str) -> None:
        return None

    def keys(self) -> Iterator[str]:
        return iter(())
