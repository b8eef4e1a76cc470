"""Core request types shared by the endpoint and the dispatcher."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Field holding a document's identifier, on the wire and in the store
ID_FIELD = "_id"

# Header carrying the shared secret checked by the dispatcher
AUTH_HEADER = "x-ironrest-auth-token"

Document = dict[str, Any]


class Action(str, Enum):
    """Actions guarded by an ``allow*`` permission."""

    VIEW = "view"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class HookPoint(str, Enum):
    """Lifecycle hook slots, named as in the bindings configuration."""

    BEFORE_VIEW = "beforeView"
    AFTER_VIEW = "afterView"
    BEFORE_INSERT = "beforeInsert"
    AFTER_INSERT = "afterInsert"
    BEFORE_UPDATE = "beforeUpdate"
    AFTER_UPDATE = "afterUpdate"
    BEFORE_DELETE = "beforeDelete"
    AFTER_DELETE = "afterDelete"


@dataclass(frozen=True)
class RequestParams:
    """Decoded path parameters: ``{prefix}/:collection/:id?``."""

    collection: str
    id: str | None = None


@dataclass
class RequestContext:
    """Everything the core needs from one inbound request.

    Attributes:
        method: Upper-case HTTP method
        params: Decoded path parameters
        body: Parsed JSON body (None when the request had none)
        headers: Request headers, keys lower-cased
        body_loader: Reads and parses the body on first use, so dispatch
            can answer 404/401 without touching it
    """

    method: str
    params: RequestParams
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    body_loader: Callable[[], Awaitable[Any]] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    async def load_body(self) -> Any:
        """Return the parsed body, running ``body_loader`` once if set."""
        if self.body_loader is not None:
            loader, self.body_loader = self.body_loader, None
            self.body = await loader()
        return self.body

    @property
    def targets_document(self) -> bool:
        return self.params.id is not None
