"""IronREST lifecycle hooks and permission predicates.

Extension points around every storage operation:
- beforeView / beforeInsert / beforeUpdate / beforeDelete: may transform
  the subject, or return False to cancel the request with 401
- afterView / afterInsert / afterUpdate / afterDelete: run after the
  response is sent (fire-and-forget; failures are logged)

Usage:
    from ironrest.hooks import hook

    @hook("stampCreated")
    def stamp_created(doc):
        return {**doc, "createdAt": time.time()}
"""

import importlib
import logging

from ironrest.hooks.registry import HookFn, HookRegistry, hook
from ironrest.hooks.service import CANCEL, HookRunner

logger = logging.getLogger(__name__)


def import_hook_modules(modules: list[str] | str | None) -> list[str]:
    """Import modules whose @hook decorators register callables.

    Accepts a list or a comma-separated string. Returns the imported names.
    """
    if isinstance(modules, str):
        modules = [m.strip() for m in modules.split(",")]
    imported = []
    for name in modules or []:
        if not name:
            continue
        importlib.import_module(name)
        logger.info("Imported hook module %s", name)
        imported.append(name)
    return imported


__all__ = [
    "CANCEL",
    "HookFn",
    "HookRegistry",
    "HookRunner",
    "hook",
    "import_hook_modules",
]
