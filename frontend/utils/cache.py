"""
Namespaced TTL cache over a string-valued storage mapping.

Each entry is a JSON document ``{"data", "expiry", "timestamp"}`` (epoch
milliseconds). Any ``MutableMapping[str, str]`` works as storage; the app
hands in ``st.session_state``-backed dicts, tests a plain dict.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, MutableMapping, Optional

logger = logging.getLogger(__name__)


class ClientCache:

    def __init__(self, namespace: str = "lgm_cache_",
                 storage: Optional[MutableMapping[str, str]] = None,
                 clock: Callable[[], float] = time.time):
        self.namespace = namespace
        self.storage = storage if storage is not None else {}
        self._clock = clock

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _own_keys(self):
        return [k for k in list(self.storage.keys()) if k.startswith(self.namespace)]

    def set(self, key: str, data: Any, ttl_minutes: float = 5) -> bool:
        """Store ``data`` for ``ttl_minutes``. Returns False when it cannot be serialized."""
        now = self._now_ms()
        try:
            entry = json.dumps({
                "data": data,
                "expiry": now + int(ttl_minutes * 60 * 1000),
                "timestamp": now,
            })
        except (TypeError, ValueError) as e:
            logger.warning("Cache set failed for %s: %s", key, e)
            return False

        self.storage[self._key(key)] = entry
        return True

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when absent, expired or unreadable."""
        raw = self.storage.get(self._key(key))
        if raw is None:
            return None

        try:
            entry = json.loads(raw)
            expiry = entry["expiry"]
        except (TypeError, ValueError, KeyError):
            self.remove(key)
            return None

        if self._now_ms() > expiry:
            self.remove(key)
            return None

        return entry.get("data")

    def remove(self, key: str) -> None:
        self.storage.pop(self._key(key), None)

    def remove_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        full_prefix = self._key(prefix)
        keys = [k for k in self._own_keys() if k.startswith(full_prefix)]
        for k in keys:
            del self.storage[k]
        return len(keys)

    def clear(self) -> None:
        """Remove every entry in this namespace, leaving foreign keys alone."""
        for k in self._own_keys():
            del self.storage[k]

    def clear_expired(self) -> int:
        """Remove expired and malformed entries. Returns how many were removed."""
        now = self._now_ms()
        removed = 0
        for k in self._own_keys():
            try:
                expired = now > json.loads(self.storage[k])["expiry"]
            except (TypeError, ValueError, KeyError):
                expired = True
            if expired:
                del self.storage[k]
                removed += 1
        return removed

    def stats(self) -> Dict[str, int]:
        now = self._now_ms()
        total = valid = expired = size = 0
        for k in self._own_keys():
            raw = self.storage[k]
            total += 1
            size += len(raw)
            try:
                if now > json.loads(raw)["expiry"]:
                    expired += 1
                else:
                    valid += 1
            except (TypeError, ValueError, KeyError):
                expired += 1
        return {"total": total, "valid": valid, "expired": expired, "size": size}

    def with_cache(self, key: str, producer: Callable[[], Any], ttl_minutes: float = 5) -> Any:
        """Return the cached value, or call ``producer`` and cache its result.

        Producer errors propagate and nothing is cached.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return cached

        logger.debug("Cache miss: %s", key)
        data = producer()
        self.set(key, data, ttl_minutes)
        return data
