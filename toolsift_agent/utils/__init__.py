"""Utility functions module."""

from toolsift_agent.utils.helpers import first_line, format_error, truncate_output

__all__ = ["first_line", "format_error", "truncate_output"]
