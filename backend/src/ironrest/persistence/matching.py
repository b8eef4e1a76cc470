"""Filter and projection evaluation for stores without a native query engine.

Supports the subset collection filters need: field equality plus the
``$eq``, ``$ne``, ``$in``, ``$nin`` and ``$exists`` operators, and
Meteor-style ``fields`` projections.
"""

import logging
from typing import Any

from ironrest.persistence.store import StoreError
from ironrest.types import ID_FIELD, Document

logger = logging.getLogger(__name__)

_MISSING = object()


def _condition_matches(value: Any, condition: Any) -> bool:
    if not (isinstance(condition, dict) and any(k.startswith("$") for k in condition)):
        return value is not _MISSING and value == condition

    for op, operand in condition.items():
        if op == "$eq":
            ok = value is not _MISSING and value == operand
        elif op == "$ne":
            ok = value is _MISSING or value != operand
        elif op == "$in":
            ok = value is not _MISSING and value in operand
        elif op == "$nin":
            ok = value is _MISSING or value not in operand
        elif op == "$exists":
            ok = (value is not _MISSING) == bool(operand)
        else:
            raise StoreError(f"Unsupported filter operator: {op}", code="BadFilter")
        if not ok:
            return False
    return True


def matches(doc: Document, filter: dict[str, Any] | None) -> bool:
    """Return True if ``doc`` satisfies every condition in ``filter``."""
    for key, condition in (filter or {}).items():
        if not _condition_matches(doc.get(key, _MISSING), condition):
            return False
    return True


def project(doc: Document, options: dict[str, Any] | None) -> Document:
    """Apply the ``fields`` option of ``options`` to a document copy.

    ``{"a": 1}`` keeps only ``a`` (and ``_id``); ``{"a": 0}`` drops ``a``.
    Other option keys are ignored.
    """
    options = options or {}
    ignored = set(options) - {"fields"}
    if ignored:
        logger.debug("Ignoring unsupported query options: %s", sorted(ignored))

    fields = options.get("fields")
    if not fields:
        return dict(doc)

    include_id = fields.get(ID_FIELD, 1)
    others = {k: v for k, v in fields.items() if k != ID_FIELD}
    if others and all(others.values()):
        result = {k: doc[k] for k in others if k in doc}
        if include_id and ID_FIELD in doc:
            result = {ID_FIELD: doc[ID_FIELD], **result}
        return result

    if any(others.values()):
        raise StoreError("Projection cannot mix inclusion and exclusion", code="BadProjection")

    result = {k: v for k, v in doc.items() if k not in others}
    if not include_id:
        result.pop(ID_FIELD, None)
    return result
