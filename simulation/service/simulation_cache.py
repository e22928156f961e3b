import copy
import time
from typing import Any, Callable, Dict, Optional

from simulation.enums.cache_kind import CacheKind
from simulation.models.cache_entry import CacheEntry
from utils.caching_utils import build_cache_key
from utils.logger_utils import get_logger

logger = get_logger("Simulation Cache")

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_MAX_ENTRIES = 100


class SimulationCache(object):
    """
    TTL and capacity bounded store with one key space per CacheKind.

    Entries are visible only while younger than the TTL. Each `put` sweeps
    expired entries and then evicts the oldest insertions (FIFO, not LRU)
    until the key space is back at capacity. Payloads are deep-copied on
    the way in and out, callers never share cached state. Not safe for
    concurrent writers outside a single event loop.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # dicts keep insertion order, which is the eviction order
        self._spaces: Dict[CacheKind, Dict[str, CacheEntry]] = {kind: {} for kind in CacheKind}
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def make_key(kind: CacheKind, operation: str, caller: str, args: Any, network: str, block: Any = "latest") -> str:
        return build_cache_key(kind.value, operation, caller, args, network, block)

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return entry.age(now) >= self.ttl_seconds

    def get(self, kind: CacheKind, key: str) -> Optional[Any]:
        space = self._spaces[kind]
        entry = space.get(key)
        if entry is None:
            self._misses += 1
            return None

        if self._is_expired(entry, self._clock()):
            del space[key]
            self._evictions += 1
            self._misses += 1
            logger.debug(f"Evicted expired {kind.value} entry on read: {key}")
            return None

        self._hits += 1
        return copy.deepcopy(entry.payload)

    def put(self, kind: CacheKind, key: str, payload: Any, network: str) -> None:
        space = self._spaces[kind]
        now = self._clock()
        # Re-inserting moves the key to the back of the FIFO order
        space.pop(key, None)
        space[key] = CacheEntry(payload=copy.deepcopy(payload), inserted_at=now, network=network)

        self._sweep_expired(kind, now)
        self._sweep_capacity(kind)

    def _sweep_expired(self, kind: CacheKind, now: float) -> None:
        space = self._spaces[kind]
        expired = [key for key, entry in space.items() if self._is_expired(entry, now)]
        for key in expired:
            del space[key]
        self._evictions += len(expired)

    def _sweep_capacity(self, kind: CacheKind) -> None:
        space = self._spaces[kind]
        while len(space) > self.max_entries:
            oldest = next(iter(space))
            del space[oldest]
            self._evictions += 1
            logger.debug(f"Evicted oldest {kind.value} entry: {oldest}")

    def clear(self) -> None:
        for space in self._spaces.values():
            space.clear()
        logger.info("Simulation cache cleared")

    def clear_for_network(self, network: str) -> int:
        removed = 0
        for space in self._spaces.values():
            keys = [key for key, entry in space.items() if entry.network == network]
            for key in keys:
                del space[key]
            removed += len(keys)
        logger.info(f"Removed {removed} cached entries for network {network}")
        return removed

    def size(self, kind: Optional[CacheKind] = None) -> int:
        if kind is not None:
            return len(self._spaces[kind])
        return sum(len(space) for space in self._spaces.values())

    def stats(self) -> Dict[str, Any]:
        lookups = self._hits + self._misses
        return {
            "entries": {kind.value: len(space) for kind, space in self._spaces.items()},
            "total_entries": self.size(),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": (self._hits / lookups * 100) if lookups else 0.0,
            "evictions": self._evictions,
            "ttl_seconds": self.ttl_seconds,
            "max_entries": self.max_entries,
        }
