"""Operation dispatcher: name plus argument bag to typed handler call."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from pydantic import ValidationError

from nocodb_mcp.serving.mcp import errors
from nocodb_mcp.serving.mcp.models import (
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
from nocodb_mcp.serving.services import handlers
from nocodb_mcp.serving.services.handlers import Handler, HandlerContext
from nocodb_mcp.serving.services.observability import ServiceObservability, observe_call

LOG = logging.getLogger("nocodb_mcp.services.dispatch")


@dataclass(frozen=True)
class OperationSpec:
    """Argument model and handler bound to one operation name."""

    name: str
    args_model: type[OperationArgs]
    handler: Handler


def _spec(name: str, args_model: type[OperationArgs], handler: Handler) -> tuple[str, OperationSpec]:
    return name, OperationSpec(name=name, args_model=args_model, handler=handler)


OPERATIONS: Mapping[str, OperationSpec] = MappingProxyType(
    dict(
        [
            _spec("list_projects", ListProjectsArgs, handlers.list_projects),
            _spec("create_project", CreateProjectArgs, handlers.create_project),
            _spec("list_tables", ListTablesArgs, handlers.list_tables),
            _spec("create_table", CreateTableArgs, handlers.create_table),
            _spec("query_table", QueryTableArgs, handlers.query_table),
            _spec("insert_record", InsertRecordArgs, handlers.insert_record),
            _spec("update_record", UpdateRecordArgs, handlers.update_record),
            _spec("delete_record", DeleteRecordArgs, handlers.delete_record),
            _spec("query_table_by_name", QueryTableByNameArgs, handlers.query_table_by_name),
        ]
    )
)


def operation_names() -> tuple[str, ...]:
    """
    List the fixed operation vocabulary.

    Returns
    -------
    tuple[str, ...]
        Operation names in registration order.
    """
    return tuple(OPERATIONS)


def _format_loc(loc: tuple[int | str, ...]) -> str:
    parts: list[str] = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        elif parts:
            parts.append(f".{item}")
        else:
            parts.append(item)
    return "".join(parts)


def parse_arguments(
    operation: str,
    args_model: type[OperationArgs],
    arguments: Mapping[str, object] | None,
) -> OperationArgs:
    """
    Validate a loose argument bag into the operation's immutable model.

    Keys with ``None`` values count as absent so optional arguments fall back
    to their defaults. Unknown keys are ignored.

    Parameters
    ----------
    operation:
        Operation name used in error messages.
    args_model:
        Pydantic model describing the operation's arguments.
    arguments:
        Raw argument bag from the transport.

    Returns
    -------
    OperationArgs
        Frozen, typed arguments.

    Raises
    ------
    errors.MissingArgumentError
        When a required field is absent; names the first such field.
    errors.InvalidArgumentError
        When a field is present but cannot be coerced to its type.
    """
    bag = {key: value for key, value in (arguments or {}).items() if value is not None}
    try:
        return args_model.model_validate(bag)
    except ValidationError as exc:
        details = exc.errors(include_url=False, include_context=False, include_input=False)
        for err in details:
            if err["type"] == "missing":
                raise errors.missing_argument(_format_loc(err["loc"]), operation) from exc
        first = details[0]
        message = f"{operation}: argument '{_format_loc(first['loc'])}' {first['msg'].lower()}"
        raise errors.invalid_argument(message, data={"errors": details}) from exc


@dataclass
class Dispatcher:
    """
    Route operation calls to their handlers.

    Unknown names and malformed arguments raise; remote-call failures come back
    as error-flagged results produced by the handlers themselves.
    """

    context: HandlerContext
    operations: Mapping[str, OperationSpec] = field(default_factory=lambda: OPERATIONS)
    observability: ServiceObservability | None = None
    transport: str = "mcp"

    def dispatch(self, name: str, arguments: Mapping[str, object] | None = None) -> OperationResult:
        """
        Execute one operation.

        Parameters
        ----------
        name:
            Operation name from the fixed vocabulary.
        arguments:
            Loose argument bag; unknown keys are ignored.

        Returns
        -------
        OperationResult
            The handler's result, unchanged.

        Raises
        ------
        errors.UnknownOperationError
            When ``name`` is not a known operation.
        """
        spec = self.operations.get(name)
        if spec is None:
            LOG.warning("Rejected unknown operation %r", name)
            raise errors.unknown_operation(name)

        def _run() -> OperationResult:
            args = parse_arguments(name, spec.args_model, arguments)
            return spec.handler(self.context, args)

        LOG.debug("Dispatching %s", name)
        result = observe_call(self.observability, transport=self.transport, name=name, func=_run)
        if result.is_error:
            LOG.info("Operation %s returned an error result", name)
        return result
