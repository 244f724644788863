"""Tool descriptors, catalogs and the synthetic tools used as structured-output channels."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from loguru import logger

from toolsift_agent.utils.helpers import first_line


class ToolKind(enum.Enum):
    """What a tool is for. Only ORDINARY tools exist on the remote server."""

    ORDINARY = "ordinary"
    SELECTION = "selection"
    TERMINATION = "termination"


@dataclass(frozen=True)
class ToolSpec:
    """A named, schema-described tool the model may call."""

    name: str
    description: str = ""
    input_schema: Mapping[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    kind: ToolKind = ToolKind.ORDINARY

    @property
    def is_remote(self) -> bool:
        return self.kind is ToolKind.ORDINARY

    @property
    def summary(self) -> str:
        """First non-blank line of the description."""
        return first_line(self.description)

    def to_schema(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": dict(self.input_schema),
            },
        }

    @classmethod
    def from_mcp(cls, raw: Mapping[str, Any]) -> ToolSpec:
        """Build a descriptor from one entry of an MCP `tools/list` result."""
        schema = raw.get("inputSchema") or {"type": "object", "properties": {}}
        return cls(
            name=str(raw["name"]),
            description=raw.get("description") or "",
            input_schema=schema,
        )


SELECTION_TOOL = ToolSpec(
    name="inform-tool",
    description=(
        "Given an existing set of tools, this tool you tell me which tools "
        "make sense to use for a given prompt."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "tools": {
                "type": "array",
                "items": {"type": "string"},
                "description": "List of tool names that are relevant to the query.",
            }
        },
        "required": ["tools"],
    },
    kind=ToolKind.SELECTION,
)

FINAL_TOOL = ToolSpec(
    name="final-tool",
    description="This tool is used to finalize the response after all tools have been executed.",
    input_schema={
        "type": "object",
        "properties": {
            "final_response": {
                "type": "string",
                "description": "The final response after executing all relevant tools.",
            }
        },
        "required": ["final_response"],
    },
    kind=ToolKind.TERMINATION,
)

RESERVED_TOOL_NAMES = frozenset({SELECTION_TOOL.name, FINAL_TOOL.name})


class ToolCatalog(Mapping[str, ToolSpec]):
    """Read-only mapping of tool name to descriptor, fetched once per session."""

    def __init__(self, tools: Iterable[ToolSpec] = ()) -> None:
        entries: dict[str, ToolSpec] = {}
        for tool in tools:
            if not tool.is_remote or tool.name in RESERVED_TOOL_NAMES:
                logger.warning(f"Ignoring tool with reserved name or kind: {tool.name}")
                continue
            if tool.name in entries:
                logger.warning(f"Duplicate tool name in catalog, keeping the last one: {tool.name}")
            entries[tool.name] = tool
        self._tools = MappingProxyType(entries)

    def __getitem__(self, name: str) -> ToolSpec:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def describe(self) -> str:
        """Render the catalog as one "`name`: summary" line per tool."""
        return "\n" + "\n".join(f"`{tool.name}`: {tool.summary}" for tool in self._tools.values())


@dataclass(frozen=True)
class ReducedToolSet:
    """The per-query subset of the catalog chosen by the selector."""

    tools: tuple[ToolSpec, ...] = ()

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self.tools)

    def __len__(self) -> int:
        return len(self.tools)

    @property
    def names(self) -> list[str]:
        return [tool.name for tool in self.tools]

    def get(self, name: str) -> ToolSpec | None:
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def with_final(self) -> ReducedToolSet:
        """Return a copy with the final-answer tool appended."""
        if any(tool.kind is ToolKind.TERMINATION for tool in self.tools):
            return self
        return ReducedToolSet(tools=(*self.tools, FINAL_TOOL))

    def get_definitions(self) -> list[dict[str, Any]]:
        return [tool.to_schema() for tool in self.tools]


@dataclass(frozen=True)
class ToolResult:
    """Result of one remote tool invocation, correlated to its request id."""

    tool_call_id: str
    content: str
    is_error: bool = False
