"""Conversation driver: the tool-calling loop behind every query."""

from collections import deque
from collections.abc import Callable
from typing import Any

from loguru import logger

from toolsift_agent.agent.context import ContextBuilder
from toolsift_agent.agent.tools.base import ReducedToolSet, ToolKind
from toolsift_agent.agent.tools.registry import ToolServerRegistry
from toolsift_agent.providers.base import ContentBlock, LLMProvider, TextBlock, ToolCallRequest
from toolsift_agent.utils.helpers import truncate_output

StepCallback = Callable[[ContentBlock], None]


def order_blocks(blocks: list[ContentBlock]) -> list[ContentBlock]:
    """
    Put the text first when a response is exactly one tool call and one text block.

    Any other shape is returned in its original order.
    """
    if len(blocks) != 2:
        return blocks
    first, second = blocks
    if isinstance(first, ToolCallRequest) and isinstance(second, TextBlock):
        return [second, first]
    return blocks


def log_step(block: ContentBlock) -> None:
    """Default step callback: log text and tool calls as they are processed."""
    if isinstance(block, TextBlock):
        logger.info(f"Model text: {truncate_output(block.text, 500)}")
    else:
        logger.info(f"Model tool call: {block.name}({block.arguments})")


class ConversationDriver:
    """
    Runs the tool-calling conversation for one query.

    It:
    1. Seeds a FIFO queue with the blocks of the first LLM response
    2. Emits text blocks to the output
    3. Executes ordinary tool calls, then asks the LLM to continue
    4. Stops on the final-answer tool or when the queue runs dry
    """

    def __init__(
        self,
        provider: LLMProvider,
        registry: ToolServerRegistry,
        context: ContextBuilder | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.0,
        max_steps: int = 1000,
        on_step: StepCallback | None = log_step,
    ) -> None:
        self.provider = provider
        self.registry = registry
        self.context = context or ContextBuilder()
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_steps = max_steps
        self.on_step = on_step

    async def run(self, query: str, reduced: ReducedToolSet) -> str:
        """
        Answer `query` using the tools in `reduced` plus the final-answer tool.

        Args:
            query: The operator's query, verbatim.
            reduced: Tools chosen by the selector.

        Returns:
            Every text fragment emitted along the way, newline-joined.
        """
        tool_set = reduced.with_final()
        tool_definitions = tool_set.get_definitions()
        messages = self.context.build_messages(query)

        pending: deque[ContentBlock] = deque(await self._ask(messages, tool_definitions))
        output: list[str] = []
        steps = 0

        while pending:
            if steps >= self.max_steps:
                logger.warning(f"Stopping after {steps} steps without a final answer")
                break
            steps += 1

            block = pending.popleft()
            if self.on_step is not None:
                self.on_step(block)

            if isinstance(block, TextBlock):
                output.append(block.text)
                self.context.add_assistant_text(messages, block.text)
                continue

            spec = tool_set.get(block.name)
            if spec is not None and spec.kind is ToolKind.TERMINATION:
                final_response = block.arguments.get("final_response")
                if isinstance(final_response, str):
                    output.append(final_response)
                break

            self.context.add_tool_call(messages, block)
            result = await self.registry.invoke(block.name, block.arguments, call_id=block.id)
            logger.debug(f"Tool {block.name} returned: {truncate_output(result.content, 500)}")
            self.context.add_tool_result(messages, block, result)

            pending.extend(await self._ask(messages, tool_definitions))

        return "\n".join(output)

    async def _ask(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]]) -> list[ContentBlock]:
        response = await self.provider.chat(
            messages=messages,
            tools=tools,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return order_blocks(response.blocks)
