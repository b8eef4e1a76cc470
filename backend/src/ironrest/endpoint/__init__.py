"""Per-collection endpoints: configuration, id translation, request handling."""

from ironrest.endpoint.config import DOCUMENT_SCOPE_PERMISSION_CHECKS, EndpointConfig
from ironrest.endpoint.endpoint import CollectionBinding, Endpoint
from ironrest.endpoint.ids import internal_id, to_internal_id, to_wire_id

__all__ = [
    "DOCUMENT_SCOPE_PERMISSION_CHECKS",
    "CollectionBinding",
    "Endpoint",
    "EndpointConfig",
    "internal_id",
    "to_internal_id",
    "to_wire_id",
]
