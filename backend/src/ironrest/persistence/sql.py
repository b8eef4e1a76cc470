"""Document store on a relational database. Dialect-neutral via SQLAlchemy Core.

Each collection is one table:

    id_key  TEXT PRIMARY KEY   -- extended JSON of the document's _id
    body    TEXT NOT NULL      -- extended JSON of the whole document

Bodies are encoded with ``bson.json_util`` so ObjectIds survive the round
trip. Filters are evaluated in Python after loading the candidate rows.
"""

import logging
import re
from typing import Any

from bson import json_util
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from ironrest.persistence.matching import matches, project
from ironrest.persistence.store import ObjectIdMixin, StoreError
from ironrest.types import ID_FIELD, Document

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


def _key(id_value: Any) -> str:
    return json_util.dumps(id_value)


class SQLStore(ObjectIdMixin):
    """One collection stored as JSON documents in a SQL table."""

    def __init__(self, engine: Engine | str, table: str):
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid collection table name: {table!r}")
        self._engine = create_engine(engine) if isinstance(engine, str) else engine
        self.table = table
        self._ensure_table()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_table(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id_key  TEXT PRIMARY KEY,
                    body    TEXT NOT NULL
                )
            """))
            conn.commit()

    def _load(self, filter: dict[str, Any]) -> list[Document]:
        id_condition = filter.get(ID_FIELD)
        with self._engine.connect() as conn:
            # Exact _id lookups go through the primary key
            if ID_FIELD in filter and not isinstance(id_condition, dict):
                rows = conn.execute(
                    text(f"SELECT body FROM {self.table} WHERE id_key = :id_key"),
                    {"id_key": _key(id_condition)},
                ).fetchall()
            else:
                rows = conn.execute(text(f"SELECT body FROM {self.table}")).fetchall()
        docs = [json_util.loads(row[0]) for row in rows]
        return [doc for doc in docs if matches(doc, filter)]

    def _insert(self, doc: Document) -> Any:
        doc = dict(doc)
        if doc.get(ID_FIELD) is None:
            doc[ID_FIELD] = self.new_id()
        try:
            with self._engine.connect() as conn:
                conn.execute(
                    text(f"INSERT INTO {self.table} (id_key, body) VALUES (:id_key, :body)"),
                    {"id_key": _key(doc[ID_FIELD]), "body": json_util.dumps(doc)},
                )
                conn.commit()
        except IntegrityError as e:
            raise StoreError(
                f"Duplicate key: {doc[ID_FIELD]}",
                code="DuplicateKey",
                details={"collection": self.table},
            ) from e
        return doc[ID_FIELD]

    def _upsert(self, filter: dict[str, Any], doc: Document) -> None:
        existing = self._load(filter)
        if not existing:
            doc = dict(doc)
            if ID_FIELD not in doc and ID_FIELD in filter:
                doc[ID_FIELD] = filter[ID_FIELD]
            self._insert(doc)
            return

        target = existing[0]
        doc = {ID_FIELD: target[ID_FIELD], **doc}
        try:
            with self._engine.connect() as conn:
                conn.execute(
                    text(f"""
                        UPDATE {self.table}
                        SET id_key = :id_key, body = :body
                        WHERE id_key = :old_key
                    """),
                    {
                        "id_key": _key(doc[ID_FIELD]),
                        "body": json_util.dumps(doc),
                        "old_key": _key(target[ID_FIELD]),
                    },
                )
                conn.commit()
        except IntegrityError as e:
            raise StoreError(
                f"Duplicate key: {doc[ID_FIELD]}",
                code="DuplicateKey",
                details={"collection": self.table},
            ) from e

    def _remove(self, filter: dict[str, Any]) -> None:
        keys = [_key(doc[ID_FIELD]) for doc in self._load(filter)]
        if not keys:
            return
        with self._engine.connect() as conn:
            for key in keys:
                conn.execute(
                    text(f"DELETE FROM {self.table} WHERE id_key = :id_key"),
                    {"id_key": key},
                )
            conn.commit()

    async def _run(self, fn, *args):
        try:
            return await run_in_threadpool(fn, *args)
        except SQLAlchemyError as e:
            logger.exception("Store operation on '%s' failed", self.table)
            raise StoreError(str(e), code=type(e).__name__) from e

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def find(self, filter: dict[str, Any], options: dict[str, Any]) -> list[Document]:
        docs = await self._run(self._load, filter)
        return [project(doc, options) for doc in docs]

    async def find_one(self, filter: dict[str, Any]) -> Document | None:
        docs = await self._run(self._load, filter)
        return docs[0] if docs else None

    async def insert(self, doc: Document) -> Any:
        return await self._run(self._insert, doc)

    async def upsert(self, filter: dict[str, Any], doc: Document) -> None:
        await self._run(self._upsert, filter, doc)

    async def remove(self, filter: dict[str, Any]) -> None:
        await self._run(self._remove, filter)
