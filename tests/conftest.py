"""Shared fixtures."""

import os

import pytest

from toolsift_agent.agent.tools.base import ToolCatalog, ToolSpec

ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_USERNAME",
    "REDIS_PWD",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of configuration tests."""
    for name in list(os.environ):
        if name.startswith("TOOLSIFT_"):
            monkeypatch.delenv(name, raising=False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def catalog():
    """A two-tool key/value catalog."""
    return ToolCatalog(
        [
            ToolSpec(
                name="get",
                description="Get the value of a key\n\nReturns null when the key is missing.",
                input_schema={"type": "object", "properties": {"key": {"type": "string"}}},
            ),
            ToolSpec(
                name="set",
                description="Set a key to a value",
                input_schema={
                    "type": "object",
                    "properties": {"key": {"type": "string"}, "value": {"type": "string"}},
                },
            ),
        ]
    )
