"""Named callables for bindings files.

A bindings file says ``allowInsert: isEditor`` or ``beforeInsert:
stampCreated``; those names are looked up here when the file is loaded.
"""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

# Hooks take the subject (document, list or id) and return the new subject.
# Permission predicates take no arguments. Either may be a coroutine function.
HookFn = Callable[..., Any]


class HookRegistry:
    """Process-wide name -> callable table.

    Modules listed in IRONREST_HOOK_MODULES populate it at import time with
    the @hook decorator, before any bindings file is read.
    """

    _callables: dict[str, HookFn] = {}

    @classmethod
    def register(cls, name: str, fn: HookFn) -> None:
        """Register ``fn`` under ``name``. The first registration wins."""
        existing = cls._callables.get(name)
        if existing is None:
            cls._callables[name] = fn
        elif existing is not fn:
            logger.warning("Hook '%s' is already registered; ignoring %r", name, fn)

    @classmethod
    def get(cls, name: str) -> HookFn:
        """Look up ``name``.

        Raises:
            ValueError: If nothing is registered under ``name``
        """
        try:
            return cls._callables[name]
        except KeyError:
            raise ValueError(
                f"Hook '{name}' is not registered. "
                "Hooks must be registered before bindings are loaded."
            ) from None

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._callables

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._callables)

    @classmethod
    def clear(cls) -> None:
        cls._callables.clear()


def hook(name: str) -> Callable[[HookFn], HookFn]:
    """Register the decorated function under ``name``.

        @hook("isEditor")
        def is_editor():
            return True
    """

    def decorator(fn: HookFn) -> HookFn:
        HookRegistry.register(name, fn)
        return fn

    return decorator
