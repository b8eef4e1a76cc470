"""Collection bindings loaded from YAML."""

from ironrest.bindings.loader import BindingDefinition, BindingsError, BindingsLoader

__all__ = ["BindingDefinition", "BindingsError", "BindingsLoader"]
