"""In-process store, used for development and tests."""

import copy
from typing import Any

from ironrest.persistence.matching import matches, project
from ironrest.persistence.store import ObjectIdMixin, StoreError
from ironrest.types import ID_FIELD, Document


class MemoryStore(ObjectIdMixin):
    """A single collection kept in a list. Documents are copied in and out."""

    def __init__(self, name: str = "memory", documents: list[Document] | None = None):
        self.name = name
        self._docs: list[Document] = []
        for doc in documents or []:
            self._insert(doc)

    def __len__(self) -> int:
        return len(self._docs)

    def _index_of(self, id_value: Any) -> int | None:
        for i, doc in enumerate(self._docs):
            if doc.get(ID_FIELD) == id_value:
                return i
        return None

    def _insert(self, doc: Document) -> Any:
        doc = copy.deepcopy(doc)
        if doc.get(ID_FIELD) is None:
            doc[ID_FIELD] = self.new_id()
        if self._index_of(doc[ID_FIELD]) is not None:
            raise StoreError(
                f"Duplicate key: {doc[ID_FIELD]}",
                code="DuplicateKey",
                details={"collection": self.name},
            )
        self._docs.append(doc)
        return doc[ID_FIELD]

    async def find(self, filter: dict[str, Any], options: dict[str, Any]) -> list[Document]:
        return [
            copy.deepcopy(project(doc, options))
            for doc in self._docs
            if matches(doc, filter)
        ]

    async def find_one(self, filter: dict[str, Any]) -> Document | None:
        for doc in self._docs:
            if matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def insert(self, doc: Document) -> Any:
        return self._insert(doc)

    async def upsert(self, filter: dict[str, Any], doc: Document) -> None:
        """Replace the first document matching ``filter``, or insert ``doc``."""
        replacement = copy.deepcopy(doc)
        for i, existing in enumerate(self._docs):
            if matches(existing, filter):
                replacement.setdefault(ID_FIELD, existing[ID_FIELD])
                other = self._index_of(replacement[ID_FIELD])
                if other is not None and other != i:
                    raise StoreError(
                        f"Duplicate key: {replacement[ID_FIELD]}",
                        code="DuplicateKey",
                        details={"collection": self.name},
                    )
                self._docs[i] = replacement
                return

        if ID_FIELD not in replacement and ID_FIELD in filter:
            replacement[ID_FIELD] = filter[ID_FIELD]
        self._insert(replacement)

    async def remove(self, filter: dict[str, Any]) -> None:
        self._docs = [doc for doc in self._docs if not matches(doc, filter)]
