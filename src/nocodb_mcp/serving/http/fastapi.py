"""FastAPI server exposing the NocoDB operations as ``/tools/{name}`` endpoints."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from nocodb_mcp import __version__
from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.mcp import errors
from nocodb_mcp.serving.mcp.models import OperationResult, ProblemDetail, ToolDescriptor
from nocodb_mcp.serving.mcp.tools import list_tool_descriptors
from nocodb_mcp.serving.services.dispatch import Dispatcher
from nocodb_mcp.serving.services.wiring import BackendResource, build_backend_resource

LOG = logging.getLogger("nocodb_mcp.serving.http.fastapi")


def http_backend_resource(cfg: ServingConfig) -> BackendResource:
    """
    Build the backend resource with call metrics labelled for HTTP.

    Returns
    -------
    BackendResource
        Dispatcher, resource service, and close hook.
    """
    return build_backend_resource(cfg, transport="http")


def problem_response(detail: ProblemDetail) -> JSONResponse:
    """
    Convert a ProblemDetail payload into a JSON HTTP response.

    Parameters
    ----------
    detail:
        Problem detail instance to serialize.

    Returns
    -------
    JSONResponse
        Response with RFC 7807 payload.
    """
    status_code = detail.status or status.HTTP_500_INTERNAL_SERVER_ERROR
    payload = detail.model_dump()
    payload.setdefault("status", status_code)
    return JSONResponse(status_code=status_code, content=payload)


def install_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for consistent Problem Details."""

    @app.exception_handler(errors.McpError)
    def _handle_mcp_error(
        _request: Request,
        exc: errors.McpError,
    ) -> JSONResponse:
        return problem_response(exc.detail)

    @app.exception_handler(RequestValidationError)
    def _handle_validation_error(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        problem = ProblemDetail(
            type="https://example.com/problems/validation-error",
            title="Invalid request",
            detail="Request validation failed",
            status=status.HTTP_400_BAD_REQUEST,
            data={"errors": exc.errors()},
        )
        return problem_response(problem)

    @app.exception_handler(Exception)
    def _handle_unexpected(
        _request: Request,
        exc: Exception,
    ) -> JSONResponse:
        LOG.exception("Unhandled error while serving request")
        problem = ProblemDetail(
            type="https://example.com/problems/internal-error",
            title="Internal error",
            detail=str(exc),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        return problem_response(problem)


def install_logging_middleware(app: FastAPI) -> None:
    """Add structured logging for each request."""

    @app.middleware("http")
    async def _log_request(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        LOG.info(
            "Handled %s %s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response


def get_app_config(request: Request) -> ServingConfig:
    """
    Retrieve the validated application configuration from state.

    Returns
    -------
    ServingConfig
        Loaded application configuration.

    Raises
    ------
    errors.McpError
        If the configuration is missing.
    """
    config: ServingConfig | None = getattr(request.app.state, "config", None)
    if config is not None:
        return config
    message = "Server configuration is not initialized"
    raise errors.backend_failure(message)


def get_dispatcher(request: Request) -> Dispatcher:
    """
    Retrieve the shared dispatcher from state.

    Returns
    -------
    Dispatcher
        Dispatcher bound to the configured NocoDB instance.

    Raises
    ------
    errors.McpError
        If the dispatcher is missing.
    """
    dispatcher: Dispatcher | None = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        message = "Dispatcher is not initialized"
        raise errors.backend_failure(message)
    return dispatcher


ConfigDep = Annotated[ServingConfig, Depends(get_app_config)]
DispatcherDep = Annotated[Dispatcher, Depends(get_dispatcher)]


def build_tools_router() -> APIRouter:
    """
    Construct the router for tool listing and invocation.

    Returns
    -------
    APIRouter
        Router exposing ``GET /tools`` and ``POST /tools/{name}``.
    """
    router = APIRouter(prefix="/tools")

    @router.get("", summary="List available tools")
    def list_tools() -> list[ToolDescriptor]:
        return list_tool_descriptors()

    @router.post("/{name}", summary="Invoke a NocoDB operation")
    def call_tool(
        name: str,
        dispatcher: DispatcherDep,
        arguments: Annotated[dict[str, object] | None, Body()] = None,
    ) -> OperationResult:
        """
        Dispatch one operation with the request body as its argument bag.

        Remote failures come back as ``200`` with ``is_error`` set; unknown
        operations and bad arguments are answered with Problem Details.

        Returns
        -------
        OperationResult
            Envelope produced by the operation handler.
        """
        return dispatcher.dispatch(name, arguments or {})

    return router


def build_health_router() -> APIRouter:
    """
    Construct the router for health endpoints.

    Returns
    -------
    APIRouter
        Router exposing health status endpoints.
    """
    router = APIRouter()

    @router.get("/health", summary="Health check for the NocoDB MCP bridge")
    def health(config: ConfigDep) -> dict[str, object]:
        return {"status": "ok", "nocodb": config.describe()}

    return router


def register_routes(app: FastAPI) -> None:
    """Wire all API routes onto the provided FastAPI application."""
    app.include_router(build_tools_router())
    app.include_router(build_health_router())


def create_app(
    *,
    config_loader: Callable[[], ServingConfig] = ServingConfig.from_env,
    backend_factory: Callable[[ServingConfig], BackendResource] = http_backend_resource,
) -> FastAPI:
    """
    Build the FastAPI application with configured lifecycle and routes.

    Parameters
    ----------
    config_loader:
        Factory for loading application configuration.
    backend_factory:
        Factory that yields a backend resource for the given configuration.

    Returns
    -------
    FastAPI
        Configured FastAPI instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        config = config_loader()
        backend_resource = backend_factory(config)
        app.state.config = config
        app.state.dispatcher = backend_resource.dispatcher
        try:
            await asyncio.sleep(0)
            yield
        finally:
            backend_resource.close()

    app = FastAPI(
        title="NocoDB MCP Tools API",
        description="HTTP surface over the NocoDB MCP operations.",
        version=__version__,
        lifespan=lifespan,
    )

    install_exception_handlers(app)
    install_logging_middleware(app)
    register_routes(app)
    return app
