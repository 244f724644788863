"""Adapter over the remote MCP tool server: list the catalog and invoke tools."""

from __future__ import annotations

from typing import Any

from loguru import logger

from toolsift_agent.agent.tools.base import RESERVED_TOOL_NAMES, ToolCatalog, ToolResult, ToolSpec
from toolsift_agent.agent.tools.mcp_client import MCPClient, MCPError
from toolsift_agent.config.schema import ToolServerConfig
from toolsift_agent.exceptions import InvocationError, ToolServerConnectionError


class ToolServerRegistry:
    """
    Owns the single long-lived connection to the tool server.

    Only ordinary remote tools pass through here; the synthetic selection and
    final-answer tools are refused before anything is sent.
    """

    def __init__(self, client: MCPClient) -> None:
        self._client = client
        self._closed = False

    @classmethod
    def from_config(cls, config: ToolServerConfig) -> ToolServerRegistry:
        return cls(MCPClient.from_config(config))

    async def connect(self) -> None:
        """Start the server connection and complete the handshake."""
        try:
            await self._client.start()
        except MCPError as e:
            raise ToolServerConnectionError(f"MCP handshake failed: {e}") from e

    async def list_tools(self) -> ToolCatalog:
        """Fetch the full tool catalog from the server."""
        try:
            raw_tools = await self._client.list_tools()
        except MCPError as e:
            raise ToolServerConnectionError(f"Failed to list tools: {e}") from e

        catalog = ToolCatalog(ToolSpec.from_mcp(raw) for raw in raw_tools)
        logger.info(f"Fetched {len(catalog)} tools from the MCP server")
        return catalog

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None, call_id: str = "") -> ToolResult:
        """
        Invoke one remote tool.

        Args:
            name: Tool name as listed in the catalog.
            arguments: Arguments chosen by the model, sent without local validation.
            call_id: Id of the tool call this result answers.

        Returns:
            The tool result correlated to `call_id`.

        Raises:
            InvocationError: The name is reserved, or the server reported an error.
        """
        if name in RESERVED_TOOL_NAMES:
            raise InvocationError(name, "synthetic tools are never sent to the tool server")

        logger.debug(f"Calling remote tool {name} with {arguments}")
        try:
            result = await self._client.call_tool(name, arguments)
        except MCPError as e:
            raise InvocationError(name, str(e), remote_error=e.data) from e

        content = render_content(result)
        if result.get("isError"):
            raise InvocationError(name, content or "tool reported an error", remote_error=result)

        return ToolResult(tool_call_id=call_id, content=content)

    async def close(self) -> None:
        """Close the server connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._client.stop()


def render_content(result: dict[str, Any]) -> str:
    """Flatten the content parts of a `tools/call` result into text."""
    content_parts = result.get("content", [])
    if isinstance(content_parts, str):
        return content_parts

    texts: list[str] = []
    for part in content_parts:
        part_type = part.get("type")
        if part_type == "text":
            texts.append(part.get("text", ""))
        elif part_type == "image":
            texts.append(f"[image: {part.get('mimeType', 'unknown')}]")
        elif part_type == "resource":
            resource = part.get("resource", {})
            texts.append(resource.get("text") or f"[resource: {resource.get('uri', 'unknown')}]")
        else:
            texts.append(f"[{part_type}]")

    return "\n".join(texts)
