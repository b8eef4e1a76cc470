"""Endpoint configuration: filters, permissions and hook slots."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from typing import Any

from ironrest.hooks.registry import HookFn, HookRegistry
from ironrest.types import Action, HookPoint

# Document-scope GET, PUT/POST and DELETE skip the allow* check that the
# collection-scope methods perform. Kept off by default so existing
# deployments behave the same; turn on per binding with
# check_document_permissions.
DOCUMENT_SCOPE_PERMISSION_CHECKS = False

Permission = bool | Callable[[], Any]


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


@dataclass(frozen=True)
class EndpointConfig:
    """Per-collection options.

    Attributes:
        collection_filters: Filter merged into every query
        collection_options: Query options (e.g. ``fields`` projection)
        allow_*: True/False, or a zero-argument predicate that must return True
        before_* / after_*: Optional hooks receiving the document, list or id
        check_document_permissions: Also enforce allow* on document-scope requests
    """

    collection_filters: dict[str, Any] = field(default_factory=dict)
    collection_options: dict[str, Any] = field(default_factory=dict)
    allow_view: Permission = True
    allow_insert: Permission = True
    allow_update: Permission = True
    allow_delete: Permission = True
    before_view: HookFn | None = None
    after_view: HookFn | None = None
    before_insert: HookFn | None = None
    after_insert: HookFn | None = None
    before_update: HookFn | None = None
    after_update: HookFn | None = None
    before_delete: HookFn | None = None
    after_delete: HookFn | None = None
    check_document_permissions: bool = DOCUMENT_SCOPE_PERMISSION_CHECKS

    def permission(self, action: Action) -> Permission:
        return {
            Action.VIEW: self.allow_view,
            Action.INSERT: self.allow_insert,
            Action.UPDATE: self.allow_update,
            Action.DELETE: self.allow_delete,
        }[action]

    def hook(self, point: HookPoint) -> HookFn | None:
        return {
            HookPoint.BEFORE_VIEW: self.before_view,
            HookPoint.AFTER_VIEW: self.after_view,
            HookPoint.BEFORE_INSERT: self.before_insert,
            HookPoint.AFTER_INSERT: self.after_insert,
            HookPoint.BEFORE_UPDATE: self.before_update,
            HookPoint.AFTER_UPDATE: self.after_update,
            HookPoint.BEFORE_DELETE: self.before_delete,
            HookPoint.AFTER_DELETE: self.after_delete,
        }[point]

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any] | None,
        resolve: Callable[[str], HookFn] = HookRegistry.get,
    ) -> "EndpointConfig":
        """Create EndpointConfig from bindings YAML/JSON or keyword options.

        Keys may be camelCase (``allowView``) or snake_case (``allow_view``).
        String values of permission and hook slots are looked up with
        ``resolve``.

        Raises:
            ValueError: On unknown option names, non-dict filters/options,
                or unresolvable hook names
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}

        for key, value in (data or {}).items():
            name = _snake_case(key)
            if name not in known:
                raise ValueError(f"Unknown endpoint option '{key}'")

            if name in ("collection_filters", "collection_options"):
                if value is None:
                    value = {}
                if not isinstance(value, dict):
                    raise ValueError(f"'{key}' must be a mapping")
            elif name == "check_document_permissions":
                if not isinstance(value, bool):
                    raise ValueError(f"'{key}' must be true or false")
            elif isinstance(value, str):
                value = resolve(value)
            elif name.startswith(("before_", "after_")):
                if value is not None and not callable(value):
                    raise ValueError(f"Hook '{key}' must be callable or a registered name")

            kwargs[name] = value

        return cls(**kwargs)
