"""Scripted stand-ins for the LLM provider and the tool server registry."""

import copy
from typing import Any

from toolsift_agent.agent.tools.base import RESERVED_TOOL_NAMES, ToolResult
from toolsift_agent.providers.base import LLMProvider, LLMResponse, TextBlock, ToolCallRequest


def text(value: str) -> TextBlock:
    return TextBlock(text=value)


def call(call_id: str, name: str, **arguments: Any) -> ToolCallRequest:
    return ToolCallRequest(id=call_id, name=name, arguments=arguments)


def response(*blocks) -> LLMResponse:
    has_calls = any(isinstance(b, ToolCallRequest) for b in blocks)
    return LLMResponse(blocks=list(blocks), finish_reason="tool_calls" if has_calls else "stop")


class ScriptedProvider(LLMProvider):
    """Returns queued responses in order and records a snapshot of every request."""

    def __init__(self, responses=()) -> None:
        super().__init__()
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def chat(
        self,
        messages,
        tools=None,
        model=None,
        max_tokens=1000,
        temperature=0.0,
        tool_choice=None,
    ) -> LLMResponse:
        self.calls.append(
            {
                "messages": copy.deepcopy(messages),
                "tools": tools,
                "model": model,
                "tool_choice": tool_choice,
            }
        )
        if not self.responses:
            raise AssertionError("unexpected LLM call")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get_default_model(self) -> str:
        return "fake/model"

    def offered_tool_names(self, index: int) -> list[str]:
        return [tool["function"]["name"] for tool in self.calls[index]["tools"] or []]


class FakeRegistry:
    """Records invocations; refuses synthetic tool names like the real adapter."""

    def __init__(self, results: dict[str, str] | None = None, error: Exception | None = None) -> None:
        self.results = results or {}
        self.error = error
        self.calls: list[tuple[str, dict[str, Any], str]] = []

    async def invoke(self, name, arguments=None, call_id="") -> ToolResult:
        self.calls.append((name, arguments, call_id))
        if name in RESERVED_TOOL_NAMES:
            raise AssertionError(f"synthetic tool {name} reached the tool server")
        if self.error is not None:
            raise self.error
        return ToolResult(tool_call_id=call_id, content=self.results.get(name, "ok"))
