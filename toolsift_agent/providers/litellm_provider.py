"""LiteLLM-based LLM provider implementation."""

import json
from typing import Any

from loguru import logger

from toolsift_agent.providers.base import ContentBlock, LLMProvider, LLMResponse, TextBlock, ToolCallRequest


class LiteLLMProvider(LLMProvider):
    """
    LLM provider using LiteLLM as a unified gateway.

    Anthropic is the default route; any model string LiteLLM understands
    (OpenAI, OpenRouter, Gemini, vLLM, ...) works the same way.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        default_model: str = "anthropic/claude-3-5-sonnet-20241022",
    ):
        super().__init__(api_key, api_base)
        self._default_model = default_model

    async def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.0,
        tool_choice: str | dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Send a chat completion request via LiteLLM."""
        import litellm

        use_model = model or self._default_model

        kwargs: dict[str, Any] = {
            "model": use_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if tools:
            kwargs["tools"] = tools
            if tool_choice is not None:
                kwargs["tool_choice"] = tool_choice

        logger.debug(f"LLM request: model={use_model}, messages={len(messages)}, tools={len(tools or [])}")

        response = await litellm.acompletion(**kwargs)
        choice = response.choices[0]
        message = choice.message

        # Text first, then tool calls in the order the model emitted them.
        blocks: list[ContentBlock] = []
        if message.content:
            blocks.append(TextBlock(text=message.content))

        if message.tool_calls:
            for tc in message.tool_calls:
                arguments = tc.function.arguments
                if isinstance(arguments, str):
                    try:
                        arguments = json.loads(arguments) if arguments else {}
                    except json.JSONDecodeError:
                        arguments = {"raw": arguments}
                if not isinstance(arguments, dict):
                    arguments = {"raw": arguments}

                blocks.append(
                    ToolCallRequest(
                        id=tc.id,
                        name=tc.function.name,
                        arguments=arguments,
                    )
                )

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        return LLMResponse(
            blocks=blocks,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
        )

    def get_default_model(self) -> str:
        """Get the default model for this provider."""
        return self._default_model
