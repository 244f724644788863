"""Provider interface and the normalized response types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class TextBlock:
    """Free text emitted by the model."""

    text: str


@dataclass(frozen=True)
class ToolCallRequest:
    """Tool call request emitted by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


ContentBlock = Union[TextBlock, ToolCallRequest]


@dataclass
class LLMResponse:
    """Normalized model response: an ordered list of content blocks."""

    blocks: list[ContentBlock] = field(default_factory=list)
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)

    @property
    def content(self) -> str | None:
        texts = [b.text for b in self.blocks if isinstance(b, TextBlock)]
        return "\n".join(texts) if texts else None

    @property
    def tool_calls(self) -> list[ToolCallRequest]:
        return [b for b in self.blocks if isinstance(b, ToolCallRequest)]

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0


class LLMProvider(ABC):
    """Base class for LLM providers."""

    def __init__(self, api_key: str | None = None, api_base: str | None = None) -> None:
        self.api_key = api_key
        self.api_base = api_base

    @abstractmethod
    async def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.0,
        tool_choice: str | dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Send a chat request and return the normalized response."""

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the default model for this provider."""
