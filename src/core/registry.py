"""Per-role cache registry owned by the composition root.

Groups the memory caches (one per logical role) with the shared durable
cache so tools can report statistics and clear tiers without reaching for
module-level globals.
"""

from __future__ import annotations

from typing import Dict, List, Mapping

from core.cache import MemoryCache
from core.durable_cache import DurableCache
from core.errors import ValidationError

AIR_QUALITY = "air_quality"
MEASUREMENTS = "measurements"
USER_SETTINGS = "user_settings"

DURABLE_TARGET = "durable"
ALL_TARGET = "all"


class CacheRegistry:
    def __init__(self, *, memory: Mapping[str, MemoryCache], durable: DurableCache) -> None:
        self._memory: Dict[str, MemoryCache] = dict(memory)
        self._durable = durable

    @property
    def durable(self) -> DurableCache:
        return self._durable

    @property
    def roles(self) -> List[str]:
        return list(self._memory)

    def memory(self, role: str) -> MemoryCache:
        try:
            return self._memory[role]
        except KeyError as e:
            raise ValidationError(f"Unknown cache role: {role}") from e

    def memory_caches(self) -> List[MemoryCache]:
        return list(self._memory.values())

    def stats(self) -> dict:
        out: dict = {role: cache.stats().to_dict() for role, cache in self._memory.items()}
        out[DURABLE_TARGET] = {
            "available": self._durable.available,
            "size_bytes": self._durable.size_bytes(),
        }
        return out

    def clear(self, target: str = ALL_TARGET) -> List[str]:
        """Clear one role, the durable tier, or everything. Returns what was cleared."""
        name = (target or "").strip()
        if name == ALL_TARGET:
            for cache in self._memory.values():
                cache.clear()
            self._durable.clear()
            return [*self._memory, DURABLE_TARGET]

        if name == DURABLE_TARGET:
            self._durable.clear()
            return [DURABLE_TARGET]

        self.memory(name).clear()
        return [name]

    def cleanup(self) -> int:
        removed = self._durable.cleanup()
        for cache in self._memory.values():
            removed += cache.sweep()
        return removed


def build_registry(
    *,
    durable: DurableCache,
    air_quality_ttl: float,
    air_quality_max_size: int,
    measurements_ttl: float,
    measurements_max_size: int,
    user_settings_ttl: float,
    user_settings_max_size: int,
) -> CacheRegistry:
    return CacheRegistry(
        memory={
            AIR_QUALITY: MemoryCache(ttl_seconds=air_quality_ttl, max_size=air_quality_max_size, name=AIR_QUALITY),
            MEASUREMENTS: MemoryCache(ttl_seconds=measurements_ttl, max_size=measurements_max_size, name=MEASUREMENTS),
            USER_SETTINGS: MemoryCache(
                ttl_seconds=user_settings_ttl,
                max_size=user_settings_max_size,
                name=USER_SETTINGS,
            ),
        },
        durable=durable,
    )
