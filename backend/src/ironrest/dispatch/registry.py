"""Collection registry and request dispatcher."""

import dataclasses
import hmac
import logging
import threading
from typing import Any

from starlette.responses import Response

from ironrest.dispatch.settings import RestSettings
from ironrest.endpoint import CollectionBinding, Endpoint, EndpointConfig
from ironrest.errors import AuthenticationFailure, CollectionNotFound, RestError
from ironrest.persistence.store import Store
from ironrest.responses import error_response
from ironrest.types import AUTH_HEADER, RequestContext

logger = logging.getLogger(__name__)


class RestRegistry:
    """Maps collection names to endpoints and dispatches requests to them.

    The name -> Endpoint table is copy-on-write: attach/detach build a new
    dict under a lock and publish it in one assignment, so requests read a
    consistent snapshot without locking. A request that already resolved its
    endpoint keeps using it after a detach.
    """

    def __init__(self, settings: RestSettings | None = None):
        self.settings = settings or RestSettings()
        self._endpoints: dict[str, Endpoint] = {}
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def configure(self, **options: Any) -> RestSettings:
        """Merge ``prefix`` and/or ``access_token`` into the settings.

        Meant to run once at startup. The prefix only affects routers
        created afterwards.

        Raises:
            TypeError: On unknown option names
        """
        self.settings = dataclasses.replace(self.settings, **options)
        return self.settings

    def attach(
        self,
        name: str,
        store: Store,
        config: EndpointConfig | dict[str, Any] | None = None,
    ) -> Endpoint:
        """Serve ``store`` under ``name``, replacing any previous binding."""
        if not isinstance(config, EndpointConfig):
            config = EndpointConfig.from_dict(config)
        endpoint = Endpoint(CollectionBinding(name=name, store=store, config=config))

        with self._write_lock:
            endpoints = dict(self._endpoints)
            replaced = name in endpoints
            endpoints[name] = endpoint
            self._endpoints = endpoints

        logger.info("%s collection '%s'", "Re-attached" if replaced else "Attached", name)
        return endpoint

    def detach(self, name: str) -> None:
        """Stop serving ``name``. Unknown names are ignored."""
        with self._write_lock:
            if name not in self._endpoints:
                return
            endpoints = dict(self._endpoints)
            del endpoints[name]
            self._endpoints = endpoints

        logger.info("Detached collection '%s'", name)

    def get(self, name: str) -> Endpoint | None:
        return self._endpoints.get(name)

    def names(self) -> list[str]:
        return sorted(self._endpoints)

    def bindings(self) -> list[CollectionBinding]:
        endpoints = self._endpoints
        return [endpoints[name].binding for name in sorted(endpoints)]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _check_token(self, context: RequestContext) -> None:
        supplied = context.headers.get(AUTH_HEADER)
        # Starlette decodes header bytes as latin-1; clients send the token as UTF-8
        expected = self.settings.access_token.encode("utf-8")
        try:
            supplied_bytes = supplied.encode("latin-1") if supplied else b""
        except UnicodeEncodeError:
            supplied_bytes = b""
        if not supplied_bytes or not hmac.compare_digest(supplied_bytes, expected):
            logger.warning(
                "Rejected %s request for '%s': %s access token",
                context.method,
                context.params.collection,
                "invalid" if supplied else "missing",
            )
            raise AuthenticationFailure()

    async def handle_request(self, context: RequestContext) -> Response:
        """Resolve the collection, check the token, delegate to the endpoint."""
        endpoint = self._endpoints.get(context.params.collection)
        try:
            if endpoint is None:
                raise CollectionNotFound(
                    reason=f"no collection named '{context.params.collection}'"
                )
            self._check_token(context)
        except RestError as e:
            logger.debug("Dispatch failed with %d: %s", e.status_code, e)
            return error_response(e)

        return await endpoint.handle(context)
