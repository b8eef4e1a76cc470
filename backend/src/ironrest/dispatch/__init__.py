"""Collection registry, dispatcher and process-wide settings."""

from ironrest.dispatch.registry import RestRegistry
from ironrest.dispatch.settings import DEFAULT_PREFIX, RestSettings

__all__ = ["DEFAULT_PREFIX", "RestRegistry", "RestSettings"]
