"""Transport-agnostic dispatch, handlers and resources."""

from nocodb_mcp.serving.services.dispatch import Dispatcher, operation_names
from nocodb_mcp.serving.services.wiring import BackendResource, build_backend_resource, build_dispatcher

__all__ = [
    "BackendResource",
    "Dispatcher",
    "build_backend_resource",
    "build_dispatcher",
    "operation_names",
]
