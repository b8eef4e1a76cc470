"""Store Protocol: the interface every collection backend implements."""

from typing import Any, Protocol, runtime_checkable

from bson import ObjectId
from bson.errors import InvalidId

from ironrest.types import Document


class StoreError(Exception):
    """Failure reported by a store operation.

    ``to_dict()`` is what clients receive in the 500 response body.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.code or "StoreError", "message": self.message}
        if self.details:
            data["details"] = self.details
        return data


@runtime_checkable
class Store(Protocol):
    """Interface every collection backend must implement.

    One store instance is bound to one collection. Query methods are
    coroutines; a request awaits exactly one of them at a time.

    The id capabilities let the endpoint translate identifiers without
    knowing the persistence layer's encoding.
    """

    async def find(
        self, filter: dict[str, Any], options: dict[str, Any]
    ) -> list[Document]: ...

    async def find_one(self, filter: dict[str, Any]) -> Document | None: ...

    async def insert(self, doc: Document) -> Any: ...

    async def upsert(self, filter: dict[str, Any], doc: Document) -> None: ...

    async def remove(self, filter: dict[str, Any]) -> None: ...

    def new_id(self) -> Any: ...

    def is_native_id(self, value: str) -> bool: ...

    def parse_id(self, value: str) -> Any: ...

    def is_internal_id(self, value: Any) -> bool: ...

    def format_id(self, value: Any) -> str: ...


class ObjectIdMixin:
    """Id capabilities for stores whose internal id type is ``bson.ObjectId``.

    Only the canonical lower-case 24-digit hex form counts as native, so
    converting a native wire id to an ObjectId and back yields the same
    string.
    """

    def new_id(self) -> ObjectId:
        return ObjectId()

    def is_native_id(self, value: str) -> bool:
        return (
            isinstance(value, str)
            and value == value.lower()
            and ObjectId.is_valid(value)
        )

    def parse_id(self, value: str) -> ObjectId:
        try:
            return ObjectId(value)
        except (InvalidId, TypeError) as e:
            raise ValueError(f"Not an ObjectId: {value!r}") from e

    def is_internal_id(self, value: Any) -> bool:
        return isinstance(value, ObjectId)

    def format_id(self, value: ObjectId) -> str:
        return str(value)
