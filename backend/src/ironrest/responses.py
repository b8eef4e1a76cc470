"""JSON response helpers."""

from typing import Any

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from starlette.background import BackgroundTask
from starlette.responses import JSONResponse, Response

from ironrest.errors import RestError

JSON_MEDIA_TYPE = "application/json"


def json_response(
    status_code: int,
    content: Any,
    background: BackgroundTask | None = None,
) -> JSONResponse:
    """JSON-encode ``content``; stray ObjectIds are written as strings."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content, custom_encoder={ObjectId: str}),
        background=background,
    )


def empty_response(
    status_code: int = 200, background: BackgroundTask | None = None
) -> Response:
    """Empty body, still labelled as JSON."""
    return Response(
        status_code=status_code,
        media_type=JSON_MEDIA_TYPE,
        background=background,
    )


def error_response(exc: RestError) -> JSONResponse:
    return json_response(exc.status_code, exc.payload)
