"""Typed MCP request/response models and error payloads."""

from __future__ import annotations

from typing import Literal

from mcp import types as mcp_types
from pydantic import BaseModel, ConfigDict, Field


class ProblemDetail(BaseModel):
    """Problem Details payload for MCP error responses."""

    type: str = Field(default="about:blank")
    title: str
    detail: str | None = None
    status: int | None = None
    instance: str | None = None
    data: dict[str, object] | None = None


class TextContent(BaseModel):
    """Single text block inside an operation result."""

    type: Literal["text"] = "text"
    text: str


class OperationResult(BaseModel):
    """
    Envelope returned by every operation handler.

    Success results carry the payload text; error results carry the failure
    text with ``is_error`` set. Never both.
    """

    content: list[TextContent]
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> OperationResult:
        """
        Build a success envelope.

        Returns
        -------
        OperationResult
            Result with a single text block.
        """
        return cls(content=[TextContent(text=text)])

    @classmethod
    def failure(cls, text: str) -> OperationResult:
        """
        Build an error-flagged envelope.

        Returns
        -------
        OperationResult
            Result with a single text block and ``is_error`` set.
        """
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        """Concatenated text of all content blocks."""
        return "\n".join(block.text for block in self.content)

    def to_mcp_content(self) -> list[mcp_types.TextContent]:
        """
        Convert content blocks to MCP library types.

        Returns
        -------
        list[mcp_types.TextContent]
            Content blocks ready for a tool-call response.
        """
        return [mcp_types.TextContent(type="text", text=block.text) for block in self.content]


class OperationArgs(BaseModel):
    """Base for the immutable per-operation argument models."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)


class ListProjectsArgs(OperationArgs):
    """list_projects takes no arguments."""


class CreateProjectArgs(OperationArgs):
    title: str
    description: str = ""


class ListTablesArgs(OperationArgs):
    project_id: str = Field(alias="projectId")


class ColumnDefinition(OperationArgs):
    """Column entry accepted by create_table."""

    column_name: str
    column_type: str
    is_primary: bool = False


class CreateTableArgs(OperationArgs):
    project_id: str = Field(alias="projectId")
    table_name: str = Field(alias="tableName")
    columns: tuple[ColumnDefinition, ...]


class QueryTableArgs(OperationArgs):
    project_id: str = Field(alias="projectId")
    table_name: str = Field(alias="tableName")
    filters: dict[str, object] = Field(default_factory=dict)
    limit: int = 100
    offset: int = 0


class InsertRecordArgs(OperationArgs):
    project_id: str = Field(alias="projectId")
    table_name: str = Field(alias="tableName")
    data: dict[str, object]


class UpdateRecordArgs(OperationArgs):
    project_id: str = Field(alias="projectId")
    table_name: str = Field(alias="tableName")
    record_id: str = Field(alias="recordId")
    data: dict[str, object]


class DeleteRecordArgs(OperationArgs):
    project_id: str = Field(alias="projectId")
    table_name: str = Field(alias="tableName")
    record_id: str = Field(alias="recordId")


class QueryTableByNameArgs(OperationArgs):
    table_name: str = Field(alias="tableName")
    limit: int = 100


class ToolDescriptor(BaseModel):
    """Static metadata describing one operation for tool listings."""

    name: str
    description: str
    input_schema: dict[str, object]

    def to_mcp_tool(self) -> mcp_types.Tool:
        """
        Convert to the MCP library's tool type.

        Returns
        -------
        mcp_types.Tool
            Tool definition for ``list_tools`` responses.
        """
        return mcp_types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
        )


class ResourceDescriptor(BaseModel):
    """Browseable project or table resource."""

    uri: str
    name: str
    description: str
    mime_type: str = "application/json"


class ResourceContents(BaseModel):
    """Serialized contents of a resource read."""

    uri: str
    text: str
    mime_type: str = "application/json"
