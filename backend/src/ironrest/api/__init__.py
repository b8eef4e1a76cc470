"""HTTP surface: FastAPI app and REST routes."""

from ironrest.api.routes import ROUTE_METHODS, create_rest_router

__all__ = ["ROUTE_METHODS", "create_rest_router"]
