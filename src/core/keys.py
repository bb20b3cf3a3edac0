"""Deterministic cache key generation."""

from __future__ import annotations

from typing import Mapping


def generate_key(prefix: str, params: Mapping[str, object]) -> str:
    # Sorted names make the key independent of mapping insertion order
    joined = "&".join(f"{name}={params[name]}" for name in sorted(params))
    return f"{prefix}:{joined}"
