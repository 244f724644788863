"""Agent module: tool selection and the conversation loop."""

from toolsift_agent.agent.loop import ConversationDriver, order_blocks
from toolsift_agent.agent.selector import ToolSelector

__all__ = ["ConversationDriver", "ToolSelector", "order_blocks"]
