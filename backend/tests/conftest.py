"""Shared fixtures: a spy store that records calls and can fail on demand."""

import pytest

from ironrest.hooks import HookRegistry
from ironrest.persistence import MemoryStore, StoreError


class SpyStore(MemoryStore):
    """MemoryStore that records each call and raises configured StoreErrors."""

    def __init__(self, name="widgets", documents=None):
        super().__init__(name, documents)
        self.calls: list[tuple] = []
        self.failures: dict[str, StoreError] = {}

    def fail(self, operation: str, error: StoreError) -> None:
        self.failures[operation] = error

    def called(self, operation: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == operation]

    def _record(self, operation, *args):
        self.calls.append((operation, *args))
        if operation in self.failures:
            raise self.failures[operation]

    async def find(self, filter, options):
        self._record("find", filter, options)
        return await super().find(filter, options)

    async def find_one(self, filter):
        self._record("find_one", filter)
        return await super().find_one(filter)

    async def insert(self, doc):
        self._record("insert", dict(doc))
        return await super().insert(doc)

    async def upsert(self, filter, doc):
        self._record("upsert", filter, dict(doc))
        return await super().upsert(filter, doc)

    async def remove(self, filter):
        self._record("remove", filter)
        return await super().remove(filter)

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("insert", "upsert", "remove")]


@pytest.fixture
def store():
    return SpyStore()


@pytest.fixture(autouse=True)
def clear_hook_registry():
    """Clear hook registry before and after each test."""
    HookRegistry.clear()
    yield
    HookRegistry.clear()
