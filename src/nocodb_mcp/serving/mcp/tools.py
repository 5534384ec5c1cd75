"""Static tool catalog advertised to MCP and HTTP clients."""

from __future__ import annotations

from nocodb_mcp.serving.mcp.models import ToolDescriptor


def _string(description: str) -> dict[str, object]:
    return {"type": "string", "description": description}


def _number(description: str) -> dict[str, object]:
    return {"type": "number", "description": description}


def _object(description: str) -> dict[str, object]:
    return {"type": "object", "description": description}


def _schema(properties: dict[str, object], required: list[str] | None = None) -> dict[str, object]:
    schema: dict[str, object] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


_PROJECT_ID = _string("Project ID")
_TABLE_NAME = _string("Table name")

_COLUMN_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "column_name": _string("Column name"),
        "column_type": _string("Column type (e.g., 'SingleLineText', 'Number', 'Date', etc.)"),
        "is_primary": {"type": "boolean", "description": "Whether this column is the primary key"},
    },
    "required": ["column_name", "column_type"],
}

TOOL_CATALOG: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="list_projects",
        description="List all NocoDB projects (databases)",
        input_schema=_schema({}),
    ),
    ToolDescriptor(
        name="create_project",
        description="Create a new NocoDB project (database)",
        input_schema=_schema(
            {
                "title": _string("Project title"),
                "description": _string("Project description (optional)"),
            },
            ["title"],
        ),
    ),
    ToolDescriptor(
        name="list_tables",
        description="List all tables in a NocoDB project",
        input_schema=_schema({"projectId": _PROJECT_ID}, ["projectId"]),
    ),
    ToolDescriptor(
        name="create_table",
        description="Create a new table in a NocoDB project",
        input_schema=_schema(
            {
                "projectId": _PROJECT_ID,
                "tableName": _TABLE_NAME,
                "columns": {
                    "type": "array",
                    "description": "Column definitions",
                    "items": _COLUMN_SCHEMA,
                },
            },
            ["projectId", "tableName", "columns"],
        ),
    ),
    ToolDescriptor(
        name="query_table",
        description="Query records from a table",
        input_schema=_schema(
            {
                "projectId": _PROJECT_ID,
                "tableName": _TABLE_NAME,
                "filters": _object("Filter conditions (optional)"),
                "limit": _number("Maximum number of records to return (optional)"),
                "offset": _number("Number of records to skip (optional)"),
            },
            ["projectId", "tableName"],
        ),
    ),
    ToolDescriptor(
        name="insert_record",
        description="Insert a new record into a table",
        input_schema=_schema(
            {
                "projectId": _PROJECT_ID,
                "tableName": _TABLE_NAME,
                "data": _object("Record data (column name -> value)"),
            },
            ["projectId", "tableName", "data"],
        ),
    ),
    ToolDescriptor(
        name="update_record",
        description="Update an existing record in a table",
        input_schema=_schema(
            {
                "projectId": _PROJECT_ID,
                "tableName": _TABLE_NAME,
                "recordId": _string("Record ID to update"),
                "data": _object("Updated record data (column name -> value)"),
            },
            ["projectId", "tableName", "recordId", "data"],
        ),
    ),
    ToolDescriptor(
        name="delete_record",
        description="Delete a record from a table",
        input_schema=_schema(
            {
                "projectId": _PROJECT_ID,
                "tableName": _TABLE_NAME,
                "recordId": _string("Record ID to delete"),
            },
            ["projectId", "tableName", "recordId"],
        ),
    ),
    ToolDescriptor(
        name="query_table_by_name",
        description="Query records from a table by table name directly",
        input_schema=_schema(
            {
                "tableName": _string("Table name (e.g., m1thx9m7x7e5nds)"),
                "limit": _number("Maximum number of records to return (optional)"),
            },
            ["tableName"],
        ),
    ),
)


def list_tool_descriptors() -> list[ToolDescriptor]:
    """Return the tool catalog in advertisement order."""
    return list(TOOL_CATALOG)


__all__ = ["TOOL_CATALOG", "list_tool_descriptors"]
