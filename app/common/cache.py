"""Tiny in-process TTL cache for read-mostly lookups (question store rows)."""
from __future__ import annotations

import os
import time
from typing import Any, Optional

_DEFAULT_TTL = int(os.getenv("READ_CACHE_SECONDS", "60"))
_DISABLED = os.getenv("READ_CACHE_DISABLED", "false").lower() == "true"


class ReadCache:
    def __init__(self, default_ttl: int = _DEFAULT_TTL, disabled: bool = _DISABLED) -> None:
        self.default_ttl = default_ttl
        self.disabled = disabled
        self._store: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> Any | None:
        if self.disabled:
            return None
        item = self._store.get(key)
        if not item:
            return None
        value, exp = item
        if time.monotonic() < exp:
            return value
        self._store.pop(key, None)
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        if self.disabled:
            return
        ttl_s = int(ttl if ttl is not None else self.default_ttl)
        self._store[key] = (value, time.monotonic() + max(1, ttl_s))


read_cache = ReadCache()

__all__ = ["ReadCache", "read_cache"]
