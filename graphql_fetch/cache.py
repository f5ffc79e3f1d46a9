"""
In-memory cache store for GraphQL results.

``MemCache`` implements the cache capability the client consumes. Keys are
canonicalized to sorted-key JSON, so two structurally equal cache keys hit
the same entry regardless of dict insertion order. Its contents can be
exported after server-side rendering and used to seed a cache elsewhere.
"""

from __future__ import annotations

import json
import logging
import time
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from .models import CacheKey, GraphQLResult

logger = logging.getLogger(__name__)


def canonical_key(key: Any) -> str:
    """Serialize a cache key deterministically."""
    if isinstance(key, CacheKey):
        return key.canonical()
    return json.dumps(key, sort_keys=True, separators=(",", ":"), default=repr)


class MemCache:
    """
    LRU cache with optional TTL.

    Examples:
        Server side:
        ```python
        cache = MemCache(size=500)
        client = GraphQLClient(url=..., cache=cache, ssr_mode=True)
        await client.query({"query": "{ posts { title } }"})
        state = cache.get_initial_state()
        ```

        Client side:
        ```python
        cache = MemCache(initial_state=state)
        ```
    """

    def __init__(
        self,
        size: int = 100,
        ttl: float = 0,
        initial_state: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the cache.

        Args:
            size: Maximum number of entries; least recently used are evicted
            ttl: Entry lifetime in seconds, 0 for no expiry
            initial_state: Output of :meth:`get_initial_state` to hydrate from
        """
        if size < 1:
            raise ValueError("size must be at least 1")
        if ttl < 0:
            raise ValueError("ttl must not be negative")

        self.size = size
        self.ttl = ttl

        # canonical key -> (stored_at, result)
        self._entries: OrderedDict[str, Tuple[float, GraphQLResult]] = OrderedDict()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

        for key, value in (initial_state or {}).items():
            result = value if isinstance(value, GraphQLResult) else GraphQLResult.from_dict(value)
            self._store(key, result)

    def get(self, key: Any) -> Optional[GraphQLResult]:
        cache_key = canonical_key(key)
        entry = self._entries.get(cache_key)

        if entry is None:
            self._stats["misses"] += 1
            return None

        stored_at, result = entry
        if self.ttl and time.monotonic() - stored_at > self.ttl:
            del self._entries[cache_key]
            self._stats["misses"] += 1
            return None

        self._entries.move_to_end(cache_key)
        self._stats["hits"] += 1
        return result

    def set(self, key: Any, value: GraphQLResult) -> None:
        self._store(canonical_key(key), value)

    def delete(self, key: Any) -> None:
        self._entries.pop(canonical_key(key), None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> List[str]:
        """Canonical keys, least recently used first."""
        return list(self._entries)

    def get_initial_state(self) -> Dict[str, Any]:
        """Export entries as JSON-safe data for hydrating another cache."""
        return {key: result.to_dict() for key, (_, result) in self._entries.items()}

    def get_stats(self) -> Dict[str, Any]:
        return {**self._stats, "size": len(self._entries), "max_size": self.size}

    def _store(self, cache_key: str, result: GraphQLResult) -> None:
        self._entries[cache_key] = (time.monotonic(), result)
        self._entries.move_to_end(cache_key)

        while len(self._entries) > self.size:
            evicted, _ = self._entries.popitem(last=False)
            self._stats["evictions"] += 1
            logger.debug(f"Evicted cache entry {evicted[:80]}")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        return canonical_key(key) in self._entries
