"""Memoization for async fetch functions backed by a MemoryCache."""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, Optional, TypeVar

from core.cache import MemoryCache

R = TypeVar("R")


def with_cache(
    fn: Callable[..., Awaitable[R]],
    cache: MemoryCache,
    key_fn: Callable[..., str],
    ttl_seconds: Optional[float] = None,
) -> Callable[..., Awaitable[R]]:
    """Wrap `fn` so calls with equal keys are served from `cache`.

    Only successful results are stored; exceptions propagate unchanged and
    leave the cache untouched, so the next call retries `fn`. Concurrent
    misses on the same key are not coalesced: each one calls `fn`.
    """

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> R:
        key = key_fn(*args, **kwargs)

        cached = cache.get(key)
        if cached is not None:
            return cached

        result = await fn(*args, **kwargs)
        cache.set(key, result, ttl_seconds)
        return result

    return wrapper


def cached(
    cache: MemoryCache,
    key_fn: Callable[..., str],
    ttl_seconds: Optional[float] = None,
) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    def _decorator(fn: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        return with_cache(fn, cache, key_fn, ttl_seconds)
    return _decorator
