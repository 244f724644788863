"""Configuration module."""

from toolsift_agent.config.loader import load_config
from toolsift_agent.config.schema import Config, LLMConfig, ToolServerConfig

__all__ = ["Config", "LLMConfig", "ToolServerConfig", "load_config"]
