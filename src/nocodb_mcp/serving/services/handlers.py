"""Operation handlers translating typed arguments into NocoDB API calls."""

from __future__ import annotations

import functools
import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from urllib.parse import quote

from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.mcp import errors
from nocodb_mcp.serving.mcp.backend import RemoteClient, RemoteRequest
from nocodb_mcp.serving.mcp.models import (
    ColumnDefinition,
    CreateProjectArgs,
    CreateTableArgs,
    DeleteRecordArgs,
    InsertRecordArgs,
    ListProjectsArgs,
    ListTablesArgs,
    OperationArgs,
    OperationResult,
    QueryTableArgs,
    QueryTableByNameArgs,
    UpdateRecordArgs,
)

LOG = logging.getLogger("nocodb_mcp.services.handlers")

META_PREFIX = "/api/v1/db/meta"
DATA_PREFIX = "/api/v1/db/data/noco"


@dataclass(frozen=True)
class HandlerContext:
    """Read-only collaborators shared by every handler invocation."""

    config: ServingConfig
    client: RemoteClient


type Handler[A: OperationArgs] = Callable[[HandlerContext, A], OperationResult]
type EndpointStrategy = Callable[[ServingConfig, QueryTableByNameArgs], RemoteRequest]


def path_segment(value: str) -> str:
    return quote(value, safe="")


def render_json(payload: object) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def records_path(project_id: str, table_name: str, record_id: str | None = None) -> str:
    path = f"{DATA_PREFIX}/{path_segment(project_id)}/{path_segment(table_name)}"
    if record_id is not None:
        path = f"{path}/{path_segment(record_id)}"
    return path


def reports_remote_failure[A: OperationArgs](
    action: str,
) -> Callable[[Handler[A]], Handler[A]]:
    """
    Convert remote-call failures raised by a handler into error results.

    Parameters
    ----------
    action:
        Verb phrase used in the error text, e.g. ``"list projects"``.

    Returns
    -------
    Callable[[Handler], Handler]
        Decorator producing a handler that never raises RemoteCallError.
    """

    def _decorate(handler: Handler[A]) -> Handler[A]:
        @functools.wraps(handler)
        def _inner(ctx: HandlerContext, args: A) -> OperationResult:
            try:
                return handler(ctx, args)
            except errors.RemoteCallError as exc:
                LOG.warning("Failed to %s: %s", action, exc.message)
                return OperationResult.failure(f"Error: Failed to {action}: {exc.message}")

        return _inner

    return _decorate


@reports_remote_failure("list projects")
def list_projects(ctx: HandlerContext, _args: ListProjectsArgs) -> OperationResult:
    """Return the raw project listing."""
    payload = ctx.client.send(RemoteRequest("GET", f"{META_PREFIX}/projects"))
    return OperationResult.success(render_json(payload))


@reports_remote_failure("create project")
def create_project(ctx: HandlerContext, args: CreateProjectArgs) -> OperationResult:
    """Create a project and echo the created record."""
    payload = ctx.client.send(
        RemoteRequest(
            "POST",
            f"{META_PREFIX}/projects",
            json={"title": args.title, "description": args.description},
        )
    )
    return OperationResult.success(f"Project created successfully: {render_json(payload)}")


@reports_remote_failure("list tables")
def list_tables(ctx: HandlerContext, args: ListTablesArgs) -> OperationResult:
    """Return the raw table listing of one project."""
    payload = ctx.client.send(
        RemoteRequest("GET", f"{META_PREFIX}/projects/{path_segment(args.project_id)}/tables")
    )
    return OperationResult.success(render_json(payload))


def column_body(column: ColumnDefinition) -> dict[str, object]:
    """
    Build the column-add body for one column definition.

    Returns
    -------
    dict[str, object]
        Body with the column name doubling as title; ``pk`` only for primary columns.
    """
    body: dict[str, object] = {
        "column_name": column.column_name,
        "title": column.column_name,
        "uidt": column.column_type,
    }
    if column.is_primary:
        body["pk"] = True
    return body


@reports_remote_failure("create table")
def create_table(ctx: HandlerContext, args: CreateTableArgs) -> OperationResult:
    """
    Create a table, then add its columns one call at a time.

    Column creation is not transactional: when a column add fails, the table
    and the columns added before it remain, and the error text says how far
    the sequence got.

    Returns
    -------
    OperationResult
        Confirmation naming the table and column count.

    Raises
    ------
    errors.RemoteCallError
        When NocoDB does not return an id for the created table, or a column add fails.
    """
    created = ctx.client.send(
        RemoteRequest(
            "POST",
            f"{META_PREFIX}/projects/{path_segment(args.project_id)}/tables",
            json={"table_name": args.table_name},
        )
    )
    table_id = created.get("id") if isinstance(created, dict) else None
    total = len(args.columns)
    if not table_id and total:
        message = f"NocoDB did not return an id for table '{args.table_name}'"
        raise errors.remote_call_failure(message, body=created)

    for added, column in enumerate(args.columns):
        try:
            ctx.client.send(
                RemoteRequest(
                    "POST",
                    f"{META_PREFIX}/tables/{path_segment(str(table_id))}/columns",
                    json=column_body(column),
                )
            )
        except errors.RemoteCallError as exc:
            message = f"{exc.message} (table {table_id} created, {added} of {total} columns added)"
            raise errors.remote_call_failure(
                message,
                status=exc.detail.status,
                body=(exc.detail.data or {}).get("remote_body"),
            ) from exc
    return OperationResult.success(
        f"Table '{args.table_name}' created successfully with {total} columns."
    )


@reports_remote_failure("query table")
def query_table(ctx: HandlerContext, args: QueryTableArgs) -> OperationResult:
    """Return one page of records, filtered with a JSON ``where`` when filters are given."""
    params: dict[str, object] = {"limit": args.limit, "offset": args.offset}
    if args.filters:
        params["where"] = json.dumps(args.filters, separators=(",", ":"), ensure_ascii=False)
    payload = ctx.client.send(
        RemoteRequest("GET", records_path(args.project_id, args.table_name), params=params)
    )
    return OperationResult.success(render_json(payload))


@reports_remote_failure("insert record")
def insert_record(ctx: HandlerContext, args: InsertRecordArgs) -> OperationResult:
    """Insert a record and echo what NocoDB stored."""
    payload = ctx.client.send(
        RemoteRequest("POST", records_path(args.project_id, args.table_name), json=args.data)
    )
    return OperationResult.success(f"Record inserted successfully: {render_json(payload)}")


@reports_remote_failure("update record")
def update_record(ctx: HandlerContext, args: UpdateRecordArgs) -> OperationResult:
    """Patch a record by id and echo the updated record."""
    payload = ctx.client.send(
        RemoteRequest(
            "PATCH",
            records_path(args.project_id, args.table_name, args.record_id),
            json=args.data,
        )
    )
    return OperationResult.success(f"Record updated successfully: {render_json(payload)}")


@reports_remote_failure("delete record")
def delete_record(ctx: HandlerContext, args: DeleteRecordArgs) -> OperationResult:
    """Delete a record by id."""
    ctx.client.send(
        RemoteRequest("DELETE", records_path(args.project_id, args.table_name, args.record_id))
    )
    return OperationResult.success("Record deleted successfully.")


def records_by_table_name(cfg: ServingConfig, args: QueryTableByNameArgs) -> RemoteRequest:
    """
    Table-scoped records endpoint with the base id as a query parameter.

    Returns
    -------
    RemoteRequest
        GET against ``/api/{version}/tables/{table}/records``.
    """
    return RemoteRequest(
        "GET",
        f"/api/{cfg.api_version}/tables/{path_segment(args.table_name)}/records",
        params={"limit": args.limit, "baseId": cfg.default_base_id},
    )


def records_by_base_path(cfg: ServingConfig, args: QueryTableByNameArgs) -> RemoteRequest:
    """
    Base-scoped records endpoint embedding the base id in the path.

    Returns
    -------
    RemoteRequest
        GET against ``/api/{version}/bases/{base}/tables/{table}/records``.

    Raises
    ------
    errors.RemoteCallError
        When no default base id is configured.
    """
    # Without a base id the base-scoped GET is never sent; the chain ends here.
    if not cfg.default_base_id:
        message = "NOCODB_BASE_ID is not configured"
        raise errors.remote_call_failure(message)
    return RemoteRequest(
        "GET",
        (
            f"/api/{cfg.api_version}/bases/{path_segment(cfg.default_base_id)}"
            f"/tables/{path_segment(args.table_name)}/records"
        ),
        params={"limit": args.limit},
    )


QUERY_BY_NAME_STRATEGIES: tuple[EndpointStrategy, ...] = (
    records_by_table_name,
    records_by_base_path,
)


def summarize_records(table_name: str, payload: object) -> str:
    """
    Describe a records page by its retrieved and total counts.

    Returns
    -------
    str
        Sentence naming the reported total and the retrieved row count.
    """
    body = payload if isinstance(payload, dict) else {}
    rows = body.get("list")
    record_count = len(rows) if isinstance(rows, list) else 0
    page_info = body.get("pageInfo")
    total = page_info.get("totalRows") if isinstance(page_info, dict) else None
    total_count = total if total is not None else record_count
    return f"Table {table_name} contains {total_count} total records. Retrieved {record_count} records."


def query_with_fallback(
    ctx: HandlerContext,
    args: QueryTableByNameArgs,
    strategies: Sequence[EndpointStrategy] = QUERY_BY_NAME_STRATEGIES,
) -> object:
    """
    Try each endpoint strategy in order and return the first successful payload.

    Returns
    -------
    object
        Decoded payload of the first strategy that succeeded.

    Raises
    ------
    errors.CombinedRemoteFailure
        When every strategy failed; the message lists each failure in order.
    """
    failures: list[errors.RemoteCallError] = []
    for strategy in strategies:
        try:
            request = strategy(ctx.config, args)
            LOG.info("Querying table %s via %s", args.table_name, request.path)
            return ctx.client.send(request)
        except errors.RemoteCallError as exc:
            LOG.warning(
                "Endpoint %s failed for table %s: %s",
                strategy.__name__,
                args.table_name,
                exc.message,
            )
            failures.append(exc)
    raise errors.combined_remote_failure(failures)


@reports_remote_failure("query table by name")
def query_table_by_name(ctx: HandlerContext, args: QueryTableByNameArgs) -> OperationResult:
    """Count records of a table addressed by name, tolerating API revision drift."""
    payload = query_with_fallback(ctx, args)
    return OperationResult.success(summarize_records(args.table_name, payload))
