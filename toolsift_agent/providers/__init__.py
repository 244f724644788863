"""LLM providers module."""

from toolsift_agent.providers.base import ContentBlock, LLMProvider, LLMResponse, TextBlock, ToolCallRequest
from toolsift_agent.providers.litellm_provider import LiteLLMProvider

__all__ = ["ContentBlock", "LLMProvider", "LLMResponse", "TextBlock", "ToolCallRequest", "LiteLLMProvider"]
