"""Browseable project/table resources backed by the NocoDB meta API."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nocodb_mcp.serving.mcp import errors
from nocodb_mcp.serving.mcp.backend import RemoteClient, RemoteRequest
from nocodb_mcp.serving.mcp.models import ResourceContents, ResourceDescriptor
from nocodb_mcp.serving.services.handlers import (
    META_PREFIX,
    path_segment,
    records_path,
    render_json,
)

LOG = logging.getLogger("nocodb_mcp.services.resources")

PROJECT_SCHEME = "nocodb://project/"
TABLE_SCHEME = "nocodb://table/"


def _list_entries(payload: object) -> list[dict[str, object]]:
    """
    Extract the ``list`` array from a NocoDB listing payload.

    Returns
    -------
    list[dict[str, object]]
        Listed entries; empty when the payload has no list.
    """
    if not isinstance(payload, dict):
        return []
    entries = payload.get("list")
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, dict)]


@dataclass
class ResourceService:
    """Lists and reads ``nocodb://`` resources."""

    client: RemoteClient

    def list_resources(self) -> list[ResourceDescriptor]:
        """
        Enumerate every project and the tables inside it.

        A project whose tables cannot be listed is still reported; a failing
        project listing yields no resources at all.

        Returns
        -------
        list[ResourceDescriptor]
            Project resources, each followed by its table resources.
        """
        try:
            payload = self.client.send(RemoteRequest("GET", f"{META_PREFIX}/projects"))
        except errors.RemoteCallError as exc:
            LOG.warning("Failed to list projects for resources: %s", exc.message)
            return []

        resources: list[ResourceDescriptor] = []
        for project in _list_entries(payload):
            project_id = str(project.get("id"))
            project_title = str(project.get("title"))
            resources.append(
                ResourceDescriptor(
                    uri=f"{PROJECT_SCHEME}{project_id}",
                    name=project_title,
                    description=f"NocoDB project: {project_title}",
                )
            )
            try:
                tables = self._project_tables(project_id)
            except errors.RemoteCallError as exc:
                LOG.warning("Failed to list tables of project %s: %s", project_id, exc.message)
                continue
            resources.extend(
                ResourceDescriptor(
                    uri=f"{TABLE_SCHEME}{project_id}/{table.get('id')}",
                    name=str(table.get("title")),
                    description=f"Table {table.get('title')} in project {project_title}",
                )
                for table in tables
            )
        return resources

    def read_resource(self, uri: str) -> ResourceContents:
        """
        Read a project or table resource.

        Parameters
        ----------
        uri:
            ``nocodb://project/{projectId}`` or ``nocodb://table/{projectId}/{tableId}``.

        Returns
        -------
        ResourceContents
            JSON text describing the project (with tables) or table (with records).

        Raises
        ------
        errors.InvalidArgumentError
            When the URI matches neither shape.
        """
        if uri.startswith(PROJECT_SCHEME):
            project_id = uri.removeprefix(PROJECT_SCHEME)
            if project_id and "/" not in project_id:
                return ResourceContents(uri=uri, text=self._read_project(project_id))
        elif uri.startswith(TABLE_SCHEME):
            project_id, _, table_id = uri.removeprefix(TABLE_SCHEME).partition("/")
            if project_id and table_id and "/" not in table_id:
                return ResourceContents(uri=uri, text=self._read_table(project_id, table_id))
        message = f"Invalid resource URI format: {uri}"
        raise errors.invalid_argument(message)

    def _read_project(self, project_id: str) -> str:
        project = self.client.send(
            RemoteRequest("GET", f"{META_PREFIX}/projects/{path_segment(project_id)}")
        )
        payload = dict(project) if isinstance(project, dict) else {"project": project}
        payload["tables"] = self._project_tables(project_id)
        return render_json(payload)

    def _read_table(self, project_id: str, table_id: str) -> str:
        metadata = self.client.send(
            RemoteRequest("GET", f"{META_PREFIX}/tables/{path_segment(table_id)}")
        )
        title = metadata.get("title") if isinstance(metadata, dict) else None
        if not title:
            message = f"NocoDB returned no title for table {table_id}"
            raise errors.remote_call_failure(message, body=metadata)
        records = self.client.send(RemoteRequest("GET", records_path(project_id, str(title))))
        return render_json({"metadata": metadata, "records": _list_entries(records)})

    def _project_tables(self, project_id: str) -> list[dict[str, object]]:
        payload = self.client.send(
            RemoteRequest("GET", f"{META_PREFIX}/projects/{path_segment(project_id)}/tables")
        )
        return _list_entries(payload)
