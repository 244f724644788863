"""Tests for configuration loading."""

import json

import pytest

from toolsift_agent.config import Config, load_config
from toolsift_agent.exceptions import ConfigurationError


def test_defaults(tmp_path):
    config = load_config(tmp_path / "missing.json", environ={})

    assert config.llm.model == "anthropic/claude-3-5-sonnet-20241022"
    assert config.llm.max_tokens == 1000
    assert config.tool_server.username == ""
    assert config.tool_server.password == ""


def test_missing_api_key_raises():
    with pytest.raises(ConfigurationError, match="API key"):
        Config().require_api_key()


def test_anthropic_api_key_fallback(tmp_path):
    config = load_config(tmp_path / "missing.json", environ={"ANTHROPIC_API_KEY": "sk-ant"})

    assert config.require_api_key() == "sk-ant"


def test_prefixed_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"llm": {"api_key": "from-file", "model": "openai/gpt-4o"}}))
    monkeypatch.setenv("TOOLSIFT_LLM__API_KEY", "from-env")

    config = load_config(path, environ={})

    assert config.llm.api_key == "from-env"
    assert config.llm.model == "openai/gpt-4o"


def test_file_wins_over_plain_fallback(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"llm": {"api_key": "from-file"}}))

    config = load_config(path, environ={"ANTHROPIC_API_KEY": "sk-ant"})

    assert config.llm.api_key == "from-file"


def test_invalid_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    config = load_config(path, environ={})

    assert config.llm.api_key == ""


def test_redis_fallbacks_reach_bridge_argv(tmp_path):
    config = load_config(
        tmp_path / "missing.json",
        environ={"REDIS_HOST": "redis.internal", "REDIS_PORT": "6380", "REDIS_PWD": "secret"},
    )

    argv = config.tool_server.bridge_argv()

    assert config.tool_server.port == 6380
    assert argv[:2] == ["docker", "run"]
    assert "REDIS_HOST=redis.internal" in argv
    assert "REDIS_PORT=6380" in argv
    assert "REDIS_USERNAME=" in argv
    assert "REDIS_PWD=secret" in argv
    assert argv[-1] == "mcp/redis"


def test_bridge_argv_override():
    config = Config(tool_server={"command": "uvx", "args": ["mcp-server-redis", "--url", "redis://localhost"]})

    assert config.tool_server.bridge_argv() == ["uvx", "mcp-server-redis", "--url", "redis://localhost"]


def test_dotenv_supplies_api_key(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ANTHROPIC_API_KEY=sk-from-dotenv\nREDIS_HOST=redis.dotenv\n")

    config = load_config(tmp_path / "missing.json", environ={}, env_file=env_file)

    assert config.require_api_key() == "sk-from-dotenv"
    assert config.tool_server.host == "redis.dotenv"


def test_dotenv_in_working_directory_is_read_by_default(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("ANTHROPIC_API_KEY=sk-from-dotenv\nTOOLSIFT_LLM__MODEL=openai/gpt-4o\n")
    monkeypatch.chdir(tmp_path)

    config = load_config(tmp_path / "missing.json", environ={})

    assert config.llm.api_key == "sk-from-dotenv"
    assert config.llm.model == "openai/gpt-4o"


def test_environment_wins_over_dotenv(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ANTHROPIC_API_KEY=sk-from-dotenv\n")

    config = load_config(tmp_path / "missing.json", environ={"ANTHROPIC_API_KEY": "sk-from-env"}, env_file=env_file)

    assert config.llm.api_key == "sk-from-env"


def test_invalid_redis_port_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="REDIS_PORT must be an integer"):
        load_config(tmp_path / "missing.json", environ={"REDIS_PORT": "not-a-port"})


def test_invalid_prefixed_value_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("TOOLSIFT_TOOL_SERVER__PORT", "not-a-port")

    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        load_config(tmp_path / "missing.json", environ={})
