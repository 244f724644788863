"""Exceptions raised by toolsift-agent."""

from typing import Any


class ToolsiftError(Exception):
    """Base class for toolsift-agent errors."""


class ConfigurationError(ToolsiftError):
    """Raised when a required setting (such as the LLM API key) is missing."""


class ToolServerConnectionError(ToolsiftError, ConnectionError):
    """Raised when the MCP tool server cannot be reached or the handshake fails."""


class InvocationError(ToolsiftError):
    """Raised when a remote tool call fails."""

    def __init__(self, tool_name: str, message: str, remote_error: Any = None) -> None:
        super().__init__(f"Tool '{tool_name}' failed: {message}")
        self.tool_name = tool_name
        self.remote_error = remote_error
