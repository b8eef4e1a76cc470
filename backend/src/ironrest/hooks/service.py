"""Permission and hook execution for one endpoint.

Resolves ``allow*`` permissions, runs before-hooks (which may transform
the subject or cancel the request) and schedules after-hooks as
fire-and-forget background tasks.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from starlette.background import BackgroundTask

from ironrest.types import Action, HookPoint

if TYPE_CHECKING:
    from ironrest.endpoint.config import EndpointConfig

logger = logging.getLogger(__name__)

# Returned by a before-hook to abort the request with 401
CANCEL = False


async def _call(fn: Any, *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class HookRunner:
    """Runs one endpoint's permission checks and lifecycle hooks."""

    def __init__(self, config: EndpointConfig, collection: str = ""):
        self.config = config
        self.collection = collection

    async def is_allowed(self, action: Action | str) -> bool:
        """Resolve ``allow<Action>``.

        A predicate must return exactly True; a plain value must be exactly
        True. Unknown action names are denied.
        """
        try:
            action = Action(action.lower() if isinstance(action, str) else action)
        except ValueError:
            return False

        allowed = self.config.permission(action)
        if callable(allowed):
            return (await _call(allowed)) is True
        return allowed is True

    async def run_before(self, point: HookPoint, subject: Any) -> Any:
        """Run a before-hook and return the (possibly replaced) subject.

        The caller decides what counts as cancellation.
        """
        fn = self.config.hook(point)
        if not callable(fn):
            return subject
        return await _call(fn, subject)

    async def run_after(self, point: HookPoint, subject: Any) -> None:
        """Run an after-hook; failures are logged, never raised."""
        fn = self.config.hook(point)
        if not callable(fn):
            return
        try:
            await _call(fn, subject)
        except Exception:
            # after-hooks are fire-and-forget
            logger.exception(
                "%s hook for collection '%s' failed", point.value, self.collection
            )

    def after_task(self, point: HookPoint, subject: Any) -> BackgroundTask | None:
        """Wrap an after-hook so it runs once the response has been sent."""
        if not callable(self.config.hook(point)):
            return None
        return BackgroundTask(self.run_after, point, subject)
