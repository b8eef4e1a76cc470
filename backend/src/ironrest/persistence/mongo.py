"""Store backed by a MongoDB collection through pymongo."""

import logging
from typing import Any

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.concurrency import run_in_threadpool

from ironrest.persistence.store import ObjectIdMixin, StoreError
from ironrest.types import Document

logger = logging.getLogger(__name__)


def _projection(options: dict[str, Any]) -> dict[str, Any] | None:
    """Translate Meteor-style ``fields`` into a pymongo projection."""
    fields = (options or {}).get("fields")
    return dict(fields) if fields else None


class MongoStore(ObjectIdMixin):
    """Thin async facade over a synchronous pymongo ``Collection``.

    Filters pass straight through to MongoDB, so the full server-side
    query language is available to ``collectionFilters``.
    """

    def __init__(self, collection: Collection):
        self._collection = collection

    @property
    def name(self) -> str:
        return self._collection.name

    async def _run(self, fn, *args, **kwargs):
        try:
            return await run_in_threadpool(fn, *args, **kwargs)
        except DuplicateKeyError as e:
            raise StoreError(
                "Duplicate key",
                code="DuplicateKey",
                details={"collection": self.name, "mongo_code": e.code},
            ) from e
        except PyMongoError as e:
            logger.exception("Mongo operation on '%s' failed", self.name)
            raise StoreError(str(e), code=type(e).__name__) from e

    async def find(self, filter: dict[str, Any], options: dict[str, Any]) -> list[Document]:
        def _fetch() -> list[Document]:
            return list(self._collection.find(filter, _projection(options)))

        return await self._run(_fetch)

    async def find_one(self, filter: dict[str, Any]) -> Document | None:
        return await self._run(self._collection.find_one, filter)

    async def insert(self, doc: Document) -> Any:
        result = await self._run(self._collection.insert_one, doc)
        return result.inserted_id

    async def upsert(self, filter: dict[str, Any], doc: Document) -> None:
        await self._run(self._collection.replace_one, filter, doc, upsert=True)

    async def remove(self, filter: dict[str, Any]) -> None:
        await self._run(self._collection.delete_many, filter)
