"""IronREST: a REST adapter over document collections.

Usage:
    from ironrest import RestRegistry, MemoryStore
    from ironrest.api.app import create_app

    registry = RestRegistry()
    registry.configure(access_token="s3cret")
    registry.attach("widgets", MemoryStore("widgets"), {"allowDelete": False})
    app = create_app(registry)
"""

from ironrest.dispatch import RestRegistry, RestSettings
from ironrest.endpoint import CollectionBinding, Endpoint, EndpointConfig
from ironrest.hooks import CANCEL, HookRegistry, hook
from ironrest.persistence import DatabaseConfig, MemoryStore, Store, StoreError, StoreFactory
from ironrest.types import AUTH_HEADER, Action, HookPoint, RequestContext, RequestParams

__version__ = "0.2.0"

__all__ = [
    "AUTH_HEADER",
    "Action",
    "CANCEL",
    "CollectionBinding",
    "DatabaseConfig",
    "Endpoint",
    "EndpointConfig",
    "HookPoint",
    "HookRegistry",
    "MemoryStore",
    "RequestContext",
    "RequestParams",
    "RestRegistry",
    "RestSettings",
    "Store",
    "StoreError",
    "StoreFactory",
    "hook",
]
