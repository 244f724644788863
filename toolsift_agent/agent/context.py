"""Context builder for the selection prompt and the tool-calling conversation."""

import json
from typing import Any

from toolsift_agent.agent.tools.base import FINAL_TOOL, SELECTION_TOOL, ToolCatalog, ToolResult
from toolsift_agent.providers.base import ToolCallRequest


class ContextBuilder:
    """
    Builds the messages sent to the LLM.

    All history is in the OpenAI chat format that LiteLLM accepts for every
    provider: plain assistant text messages, assistant messages carrying a
    single `tool_calls` entry, and `tool` messages answering them.
    """

    SYSTEM_PROMPT = (
        "You are a helpful assistant. Use the tools provided to answer the query. "
        f"Once you're done call the '{FINAL_TOOL.name}' tool to indicate that you have "
        "made all the necessary tool calls."
    )

    def build_selection_messages(self, query: str, catalog: ToolCatalog) -> list[dict[str, Any]]:
        """Build the single user message asking which tools the query needs."""
        prompt = (
            "Given the following query, which tools should I use?\n"
            f"Query: {query}\n"
            f"Available tools: {catalog.describe()}\n"
            f"Use the '{SELECTION_TOOL.name}' tool to tell me which tools make sense to use. "
            "Send only the names of the tools that are relevant to the query."
        )
        return [{"role": "user", "content": prompt}]

    def build_messages(self, query: str) -> list[dict[str, Any]]:
        """Build the opening messages of a conversation."""
        return [
            {"role": "user", "content": self.SYSTEM_PROMPT},
            {"role": "user", "content": query},
        ]

    def add_assistant_text(self, messages: list[dict[str, Any]], text: str) -> list[dict[str, Any]]:
        messages.append({"role": "assistant", "content": text})
        return messages

    def add_tool_call(self, messages: list[dict[str, Any]], call: ToolCallRequest) -> list[dict[str, Any]]:
        """
        Add an assistant message recording one tool call.

        Args:
            messages: Current message list.
            call: The tool call emitted by the model.

        Returns:
            Updated message list.
        """
        messages.append(
            {
                "role": "assistant",
                "content": "",
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": call.name,
                            "arguments": json.dumps(call.arguments, ensure_ascii=False),
                        },
                    }
                ],
            }
        )
        return messages

    def add_tool_result(
        self,
        messages: list[dict[str, Any]],
        call: ToolCallRequest,
        result: ToolResult,
    ) -> list[dict[str, Any]]:
        """
        Add the tool message answering a recorded tool call.

        Args:
            messages: Current message list.
            call: The tool call being answered.
            result: What the tool server returned.

        Returns:
            Updated message list.
        """
        messages.append(
            {
                "role": "tool",
                "tool_call_id": result.tool_call_id or call.id,
                "name": call.name,
                "content": result.content,
            }
        )
        return messages
