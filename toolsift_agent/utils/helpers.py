"""Common utility functions."""


def first_line(text: str | None) -> str:
    """
    Return the first non-blank line of a possibly multi-line text.

    Args:
        text: Text to scan, may be None.

    Returns:
        The stripped first non-blank line, or an empty string.
    """
    for line in (text or "").splitlines():
        if line.strip():
            return line.strip()
    return ""


def truncate_output(text: str, max_length: int = 4000) -> str:
    """
    Truncate text output to keep log lines readable.

    Args:
        text: Text to truncate.
        max_length: Maximum allowed length.

    Returns:
        Truncated text with indicator if truncated.
    """
    if len(text) <= max_length:
        return text
    half = max_length // 2
    return text[:half] + f"\n\n... [truncated {len(text) - max_length} chars] ...\n\n" + text[-half:]


def format_error(error: BaseException) -> str:
    """
    Format an exception for display.

    Args:
        error: The exception to format.

    Returns:
        Human-readable error string.
    """
    error_type = type(error).__name__
    return f"{error_type}: {str(error)}"
