"""MCP error taxonomy and helpers for Problem Details responses."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from nocodb_mcp.serving.mcp.models import ProblemDetail


@dataclass
class McpError(Exception):
    """Base MCP error carrying a ProblemDetail payload."""

    detail: ProblemDetail

    def __str__(self) -> str:
        """
        Return a concise string for logging/diagnostics.

        Returns
        -------
        str
            Concise representation of the problem.
        """
        return f"{self.detail.title}: {self.detail.detail or ''}".strip()

    @property
    def message(self) -> str:
        """Human-readable cause without the problem title."""
        return self.detail.detail or self.detail.title


@dataclass
class UnknownOperationError(McpError):
    """Operation name outside the fixed vocabulary."""


@dataclass
class MissingArgumentError(McpError):
    """Required argument absent from the argument bag."""

    @property
    def field(self) -> str:
        """Name of the missing argument as the caller spells it."""
        return str((self.detail.data or {}).get("field", ""))


@dataclass
class InvalidArgumentError(McpError):
    """Argument present but unusable."""


@dataclass
class RemoteCallError(McpError):
    """NocoDB call failed at the network level or with a non-2xx status."""


@dataclass
class CombinedRemoteFailure(RemoteCallError):
    """Every endpoint strategy of a fallback chain failed."""


def unknown_operation(name: str) -> UnknownOperationError:
    """
    Construct an unknown-operation problem.

    Returns
    -------
    UnknownOperationError
        Error naming the rejected operation.
    """
    return UnknownOperationError(
        detail=ProblemDetail(
            type="https://example.com/problems/unknown-operation",
            title="Unknown operation",
            detail=f"Unknown tool: {name}",
            status=404,
            data={"operation": name},
        )
    )


def missing_argument(field: str, operation: str) -> MissingArgumentError:
    """
    Construct a missing-argument problem.

    Returns
    -------
    MissingArgumentError
        Error naming exactly the absent field.
    """
    return MissingArgumentError(
        detail=ProblemDetail(
            type="https://example.com/problems/missing-argument",
            title="Missing argument",
            detail=f"{operation} requires argument '{field}'",
            status=400,
            data={"field": field, "operation": operation},
        )
    )


def invalid_argument(message: str, *, data: dict[str, object] | None = None) -> InvalidArgumentError:
    """
    Construct an invalid-argument problem.

    Returns
    -------
    InvalidArgumentError
        Error wrapping a ProblemDetail payload.
    """
    return InvalidArgumentError(
        detail=ProblemDetail(
            type="https://example.com/problems/invalid-argument",
            title="Invalid argument",
            detail=message,
            status=400,
            data=data,
        )
    )


def remote_call_failure(
    message: str,
    *,
    status: int | None = None,
    body: object = None,
) -> RemoteCallError:
    """
    Construct a remote-call failure problem.

    Parameters
    ----------
    message:
        Human-readable cause.
    status:
        HTTP status returned by NocoDB, when a response was received.
    body:
        Decoded error body returned by NocoDB, if any.

    Returns
    -------
    RemoteCallError
        Error wrapping a ProblemDetail payload.
    """
    data: dict[str, object] = {}
    if status is not None:
        data["remote_status"] = status
    if body is not None:
        data["remote_body"] = body
    return RemoteCallError(
        detail=ProblemDetail(
            type="https://example.com/problems/remote-call-failure",
            title="Remote call failed",
            detail=message,
            status=502,
            data=data or None,
        )
    )


def combined_remote_failure(failures: Sequence[RemoteCallError]) -> CombinedRemoteFailure:
    """
    Fold the failures of a fallback chain into one problem.

    The first failure is reported as-is and each later one is appended as an
    alternative attempt, so the message names every endpoint shape tried.

    Returns
    -------
    CombinedRemoteFailure
        Error whose detail contains every underlying message in attempt order.
    """
    messages = [failure.message for failure in failures]
    parts = messages[:1]
    parts.extend(f"Alternative approach also failed: {msg}" for msg in messages[1:])
    return CombinedRemoteFailure(
        detail=ProblemDetail(
            type="https://example.com/problems/remote-call-failure",
            title="Remote call failed",
            detail=". ".join(parts),
            status=502,
            data={"attempts": messages},
        )
    )


def backend_failure(message: str) -> McpError:
    """
    Construct a backend-failure problem for server wiring faults.

    Returns
    -------
    McpError
        Error wrapping a ProblemDetail payload.
    """
    return McpError(
        detail=ProblemDetail(
            type="https://example.com/problems/backend-failure",
            title="Backend failure",
            detail=message,
            status=500,
        )
    )
