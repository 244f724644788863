"""Agent tools module."""

from toolsift_agent.agent.tools.base import (
    FINAL_TOOL,
    SELECTION_TOOL,
    ReducedToolSet,
    ToolCatalog,
    ToolKind,
    ToolResult,
    ToolSpec,
)
from toolsift_agent.agent.tools.registry import ToolServerRegistry

__all__ = [
    "FINAL_TOOL",
    "SELECTION_TOOL",
    "ReducedToolSet",
    "ToolCatalog",
    "ToolKind",
    "ToolResult",
    "ToolSpec",
    "ToolServerRegistry",
]
