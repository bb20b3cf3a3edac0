import pytest

from core.durable_cache import DurableCache
from core.storage import MemoryStorage


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool registration."""

    def __init__(self) -> None:
        self.tools = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def durable(storage):
    return DurableCache(storage, prefix="eco-tracker-cache", default_ttl_seconds=300)
