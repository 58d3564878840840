"""Tool-server resolution and legacy node-data migration."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from nodechord.logging import get_logger
from nodechord.protocols.mcp.types import ToolServerConfig


@runtime_checkable
class ToolServerResolver(Protocol):
    """Maps symbolic tool-server identifiers to connection descriptors."""

    async def resolve(self, server_id: str) -> ToolServerConfig | None:
        """Resolve one identifier. Returns None when unknown."""
        ...

    async def resolve_many(self, server_ids: Iterable[str]) -> list[ToolServerConfig]:
        """Resolve several identifiers, silently dropping unknown ones."""
        ...


class InMemoryToolServerResolver:
    """Resolver backed by a plain mapping of id to config.

    Example:
        >>> resolver = InMemoryToolServerResolver({
        ...     "firecrawl": ToolServerConfig(name="Firecrawl", url="https://..."),
        ... })
        >>> await resolver.resolve("firecrawl")
    """

    def __init__(
        self,
        servers: Mapping[str, ToolServerConfig | Mapping[str, Any]] | None = None,
    ) -> None:
        self._servers: dict[str, ToolServerConfig] = {}
        for server_id, config in (servers or {}).items():
            self.register(server_id, config)

    def register(self, server_id: str, config: ToolServerConfig | Mapping[str, Any]) -> None:
        """Add or replace a catalog entry."""
        if not isinstance(config, ToolServerConfig):
            config = ToolServerConfig.model_validate(config)
        if config.id is None:
            config = config.model_copy(update={"id": server_id})
        self._servers[server_id] = config

    async def resolve(self, server_id: str) -> ToolServerConfig | None:
        config = self._servers.get(server_id)
        if config is None:
            get_logger().warning("Could not resolve MCP server ID", server_id=server_id)
        return config

    async def resolve_many(self, server_ids: Iterable[str]) -> list[ToolServerConfig]:
        return [self._servers[sid] for sid in server_ids if sid in self._servers]


def migrate_node_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Translate legacy inline tool lists into the current node-data shape.

    Legacy shapes handled:

    * ``mcpServerId`` on an agent node becomes ``mcpServerIds``.
    * ``mcpTools`` entries given as bare strings, or as mappings carrying only
      a ``serverId``/``id`` and no ``url``, are catalog references and move to
      ``mcpServerIds``.
    * Remaining inline entries are normalized (``toolName`` -> ``name``,
      ``accessToken`` -> ``authToken``).

    The input mapping is never modified.
    """
    migrated = dict(data)
    server_ids: list[str] = list(migrated.get("mcpServerIds") or [])

    legacy_id = migrated.pop("mcpServerId", None)
    if legacy_id and legacy_id not in server_ids:
        server_ids.append(legacy_id)

    inline: list[dict[str, Any]] = []
    for entry in migrated.get("mcpTools") or []:
        if isinstance(entry, str):
            if entry not in server_ids:
                server_ids.append(entry)
            continue
        ref = entry.get("serverId") or entry.get("id")
        if ref and not entry.get("url"):
            if ref not in server_ids:
                server_ids.append(ref)
            continue
        normalized = dict(entry)
        if "name" not in normalized and "toolName" in normalized:
            normalized["name"] = normalized.pop("toolName")
        if "authToken" not in normalized and "accessToken" in normalized:
            normalized["authToken"] = normalized.pop("accessToken")
        inline.append(normalized)

    if "mcpTools" in migrated or inline:
        migrated["mcpTools"] = inline
    if server_ids:
        migrated["mcpServerIds"] = server_ids
    return migrated
