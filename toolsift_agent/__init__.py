"""toolsift-agent: an MCP chat client that narrows the tool set per query."""

__version__ = "0.1.0"
