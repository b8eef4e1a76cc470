"""Request failure taxonomy.

The endpoint and the dispatcher raise these to end a request. Each carries
the HTTP status and the JSON payload it renders to; rendering happens in
one place (``ironrest.responses.error_response``).
"""

from typing import Any


class RestError(Exception):
    """Base class for all terminal request failures."""

    status_code: int = 500
    default_payload: Any = "Internal Server Error"

    def __init__(self, payload: Any = None, reason: str | None = None) -> None:
        self.payload = self.default_payload if payload is None else payload
        self.reason = reason
        super().__init__(reason or str(self.payload))


class BadRequest(RestError):
    """The request body is not a JSON document."""

    status_code = 400
    default_payload = "Bad Request"


class AuthenticationFailure(RestError):
    """Missing or wrong access token."""

    status_code = 401
    default_payload = "Unauthorized"


class AuthorizationFailure(RestError):
    """Permission denied, or a before-hook cancelled the request."""

    status_code = 401
    default_payload = "Unauthorized"


class CollectionNotFound(RestError):
    status_code = 404
    default_payload = "Not Found"


class StorageFailure(RestError):
    """The store reported an error. Payload is the serialized store error."""

    status_code = 500


class UnsupportedMethod(RestError):
    status_code = 501
    default_payload = "Not Implemented"
