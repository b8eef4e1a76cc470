"""REST routes: ``{prefix}/{collection}`` and ``{prefix}/{collection}/{id}``."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import Response

from ironrest.dispatch.registry import RestRegistry
from ironrest.errors import BadRequest
from ironrest.types import RequestContext, RequestParams

# Every method reaches the dispatcher, so unknown collections answer 404,
# bad tokens 401 and methods the endpoint does not implement 501.
ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]

_BODY_METHODS = {"POST", "PUT", "PATCH"}


async def _read_body(request: Request) -> Any:
    if request.method not in _BODY_METHODS:
        return None
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return await request.json()
    except ValueError:
        raise BadRequest(reason="request body is not valid JSON")


def create_rest_router(registry: RestRegistry) -> APIRouter:
    """Create the router that feeds requests to ``registry``.

    The prefix is read from the registry settings when the router is built.
    The body is parsed only once the endpoint asks for it.
    """
    router = APIRouter(prefix=registry.settings.normalized_prefix, tags=["collections"])

    async def _dispatch(request: Request, collection: str, id: str | None) -> Response:
        context = RequestContext(
            method=request.method,
            params=RequestParams(collection=collection, id=id),
            headers=dict(request.headers),
            body_loader=lambda: _read_body(request),
        )
        return await registry.handle_request(context)

    @router.api_route("/{collection}", methods=ROUTE_METHODS)
    async def collection_route(collection: str, request: Request) -> Response:
        return await _dispatch(request, collection, None)

    @router.api_route("/{collection}/{id}", methods=ROUTE_METHODS)
    async def document_route(collection: str, id: str, request: Request) -> Response:
        return await _dispatch(request, collection, id)

    return router
