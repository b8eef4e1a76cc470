"""Identifier translation between wire form (strings) and store form."""

from typing import Any

from ironrest.persistence.store import Store
from ironrest.types import ID_FIELD


def internal_id(store: Store, value: Any) -> Any:
    """Convert one wire id to the store's representation if it has the native shape."""
    if isinstance(value, str) and store.is_native_id(value):
        return store.parse_id(value)
    return value


def to_internal_id(store: Store, doc: dict[str, Any], fallback_id: Any = None) -> dict[str, Any]:
    """Set ``doc["_id"]`` to the internal form of its id, or of ``fallback_id``.

    Mutates and returns ``doc``.
    """
    doc[ID_FIELD] = internal_id(store, doc.get(ID_FIELD) or fallback_id)
    return doc


def to_wire_id(store: Store, doc: Any) -> Any:
    """Replace internal ids with their string form, in place.

    Lists are converted element-wise. Anything without an internal ``_id``
    passes through untouched, which makes the conversion idempotent.
    """
    if isinstance(doc, list):
        for item in doc:
            to_wire_id(store, item)
        return doc

    if isinstance(doc, dict) and store.is_internal_id(doc.get(ID_FIELD)):
        doc[ID_FIELD] = store.format_id(doc[ID_FIELD])
    return doc
