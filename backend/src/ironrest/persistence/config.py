"""Database configuration and store factory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

if TYPE_CHECKING:
    from ironrest.persistence.store import Store

logger = logging.getLogger(__name__)

DEFAULT_MONGO_DATABASE = "ironrest"


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports memory://, sqlite:///, postgresql:// and mongodb:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. IRONREST_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: memory://
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("IRONREST_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        return cls(url="memory://")

    @property
    def is_memory(self) -> bool:
        return self.url.startswith("memory")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def is_mongodb(self) -> bool:
        return self.url.startswith(("mongodb://", "mongodb+srv://"))

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.url.startswith("postgresql://"):
            return self.url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.url

    @property
    def mongo_database(self) -> str:
        """Database name from the URL path, e.g. mongodb://host/mydb."""
        path = urlparse(self.url).path.lstrip("/")
        return path or DEFAULT_MONGO_DATABASE


class StoreFactory:
    """Creates one store per collection, sharing a single engine or client."""

    def __init__(self, config: DatabaseConfig):
        if not (
            config.is_memory
            or config.is_sqlite
            or config.is_postgresql
            or config.is_mongodb
        ):
            raise ValueError(f"Unsupported database URL scheme: {config.url}")
        self.config = config
        self._backend: Any = None

    def _get_backend(self) -> Any:
        if self._backend is not None:
            return self._backend

        if self.config.is_sqlite or self.config.is_postgresql:
            from sqlalchemy import create_engine

            self._backend = create_engine(self.config.sqlalchemy_url)
        elif self.config.is_mongodb:
            from pymongo import MongoClient

            self._backend = MongoClient(self.config.url)
        return self._backend

    def create(self, collection: str) -> Store:
        """Create the store for ``collection``."""
        if self.config.is_memory:
            from ironrest.persistence.memory import MemoryStore

            return MemoryStore(collection)

        if self.config.is_mongodb:
            from ironrest.persistence.mongo import MongoStore

            client = self._get_backend()
            return MongoStore(client[self.config.mongo_database][collection])

        from ironrest.persistence.sql import SQLStore

        return SQLStore(self._get_backend(), collection)

    def close(self) -> None:
        if self._backend is None:
            return
        if self.config.is_mongodb:
            self._backend.close()
        else:
            self._backend.dispose()
        logger.debug("Closed store backend for %s", self.config.url.split("://", 1)[0])
        self._backend = None
