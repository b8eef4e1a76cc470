"""Per-collection request handler.

An Endpoint serves one collection binding. Requests without a document id
target the collection (list/create); requests with one target a single
document (read/replace/delete). Every request runs strictly in sequence:

    permission -> before-hook -> store operation -> re-fetch -> response
    -> after-hook (background, after the response is sent)
"""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

from starlette.responses import Response

from ironrest.endpoint.config import EndpointConfig
from ironrest.endpoint.ids import internal_id, to_internal_id, to_wire_id
from ironrest.errors import (
    AuthorizationFailure,
    BadRequest,
    RestError,
    StorageFailure,
    UnsupportedMethod,
)
from ironrest.hooks.service import CANCEL, HookRunner
from ironrest.persistence.store import Store, StoreError
from ironrest.responses import empty_response, error_response, json_response
from ironrest.types import ID_FIELD, Action, Document, HookPoint, RequestContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionBinding:
    """A collection name paired with its store and endpoint options."""

    name: str
    store: Store
    config: EndpointConfig = field(default_factory=EndpointConfig)


class Endpoint:
    """Enforces permissions, runs hooks and normalizes ids for one collection."""

    def __init__(self, binding: CollectionBinding):
        self.binding = binding
        self.hooks = HookRunner(binding.config, binding.name)

    @property
    def name(self) -> str:
        return self.binding.name

    @property
    def store(self) -> Store:
        return self.binding.store

    @property
    def config(self) -> EndpointConfig:
        return self.binding.config

    async def handle(self, context: RequestContext) -> Response:
        """Serve one request and return its response.

        After-hooks are attached to the response as a background task.
        """
        try:
            if context.targets_document:
                return await self._handle_document(context)
            return await self._handle_collection(context)
        except RestError as e:
            logger.info(
                "%s %s/%s -> %d: %s",
                context.method,
                self.name,
                context.params.id or "",
                e.status_code,
                e,
            )
            return error_response(e)

    def to_internal_id(self, doc: Document, fallback_id: Any = None) -> Document:
        return to_internal_id(self.store, doc, fallback_id)

    def to_wire_id(self, doc: Any) -> Any:
        return to_wire_id(self.store, doc)

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    async def _require(self, action: Action) -> None:
        if not await self.hooks.is_allowed(action):
            raise AuthorizationFailure(reason=f"{action.value} not allowed")

    async def _before(self, point: HookPoint, subject: Any) -> Any:
        result = await self.hooks.run_before(point, subject)
        if result is CANCEL:
            raise AuthorizationFailure(reason=f"{point.value} cancelled the request")
        return result

    async def _store(self, operation: Awaitable[Any]) -> Any:
        try:
            return await operation
        except StoreError as e:
            raise StorageFailure(e.to_dict(), reason=e.message) from e

    def _document_filter(self, wire_id: str) -> dict[str, Any]:
        return {
            **self.config.collection_filters,
            ID_FIELD: internal_id(self.store, wire_id),
        }

    @staticmethod
    def _as_document(data: Any) -> Document:
        if not isinstance(data, dict):
            raise BadRequest(reason="request body must be a JSON object")
        return data

    # ------------------------------------------------------------------
    # Collection scope
    # ------------------------------------------------------------------

    async def _handle_collection(self, context: RequestContext) -> Response:
        if context.method == "GET":
            return await self._list()
        if context.method == "POST":
            return await self._insert(context)
        raise UnsupportedMethod(reason=f"{context.method} on a collection")

    async def _list(self) -> Response:
        await self._require(Action.VIEW)

        docs = await self._store(
            self.store.find(
                dict(self.config.collection_filters),
                dict(self.config.collection_options),
            )
        )
        result = await self._before(HookPoint.BEFORE_VIEW, self.to_wire_id(docs))

        return json_response(
            200, result, background=self.hooks.after_task(HookPoint.AFTER_VIEW, result)
        )

    async def _insert(self, context: RequestContext) -> Response:
        await self._require(Action.INSERT)

        body = await context.load_body()
        data = self._as_document(await self._before(HookPoint.BEFORE_INSERT, body))
        self.to_internal_id(data)
        if data[ID_FIELD] is None:
            data[ID_FIELD] = self.store.new_id()

        new_id = await self._store(self.store.insert(data))
        result = self.to_wire_id(await self._store(self.store.find_one({ID_FIELD: new_id})))
        logger.debug("Inserted %s into '%s'", new_id, self.name)

        return json_response(
            200, result, background=self.hooks.after_task(HookPoint.AFTER_INSERT, result)
        )

    # ------------------------------------------------------------------
    # Document scope
    # ------------------------------------------------------------------

    async def _handle_document(self, context: RequestContext) -> Response:
        doc_id = context.params.id
        if context.method == "GET":
            return await self._get(doc_id)
        if context.method in ("POST", "PUT"):
            return await self._replace(doc_id, context)
        if context.method == "DELETE":
            return await self._delete(doc_id)
        raise UnsupportedMethod(reason=f"{context.method} on a document")

    async def _get(self, doc_id: str) -> Response:
        if self.config.check_document_permissions:
            await self._require(Action.VIEW)

        doc = await self._store(self.store.find_one(self._document_filter(doc_id)))
        result = await self._before(HookPoint.BEFORE_VIEW, self.to_wire_id(doc))

        return json_response(
            200, result, background=self.hooks.after_task(HookPoint.AFTER_VIEW, result)
        )

    async def _replace(self, doc_id: str, context: RequestContext) -> Response:
        if self.config.check_document_permissions:
            await self._require(Action.UPDATE)

        body = await context.load_body()
        data = self._as_document(await self._before(HookPoint.BEFORE_UPDATE, body))
        # The path id always wins over an _id in the body
        data[ID_FIELD] = internal_id(self.store, doc_id)

        await self._store(self.store.upsert(self._document_filter(doc_id), data))
        result = self.to_wire_id(
            await self._store(self.store.find_one({ID_FIELD: data[ID_FIELD]}))
        )

        return json_response(
            200, result, background=self.hooks.after_task(HookPoint.AFTER_UPDATE, result)
        )

    async def _delete(self, doc_id: str) -> Response:
        if self.config.check_document_permissions:
            await self._require(Action.DELETE)

        # Any falsy answer cancels a delete, not only False
        if not await self.hooks.run_before(HookPoint.BEFORE_DELETE, doc_id):
            raise AuthorizationFailure(reason="beforeDelete cancelled the request")

        await self._store(self.store.remove(self._document_filter(doc_id)))
        logger.debug("Removed %s from '%s'", doc_id, self.name)

        return empty_response(
            200, background=self.hooks.after_task(HookPoint.AFTER_DELETE, doc_id)
        )
