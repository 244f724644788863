"""Session module."""

from toolsift_agent.session.manager import ChatSession

__all__ = ["ChatSession"]
