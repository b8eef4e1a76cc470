"""Persistence layer - collection stores and their configuration."""

from ironrest.persistence.config import DatabaseConfig, StoreFactory
from ironrest.persistence.memory import MemoryStore
from ironrest.persistence.store import ObjectIdMixin, Store, StoreError

__all__ = [
    "DatabaseConfig",
    "MemoryStore",
    "ObjectIdMixin",
    "Store",
    "StoreError",
    "StoreFactory",
]
