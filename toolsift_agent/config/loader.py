"""Configuration loader for toolsift-agent."""

import json
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger
from pydantic import ValidationError

from toolsift_agent.config.schema import Config
from toolsift_agent.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = Path.home() / ".toolsift-agent"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"
DEFAULT_ENV_FILE = Path(".env")

# Plain variable names understood in addition to the TOOLSIFT_ prefixed ones.
LLM_ENV_FALLBACKS = {"api_key": "ANTHROPIC_API_KEY"}
TOOL_SERVER_ENV_FALLBACKS = {
    "host": "REDIS_HOST",
    "port": "REDIS_PORT",
    "username": "REDIS_USERNAME",
    "password": "REDIS_PWD",
}


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    env_file: Path | None = None,
) -> Config:
    """
    Load configuration from file, `.env` and environment variables.

    Priority: TOOLSIFT_* environment variables > config file > TOOLSIFT_*
    entries of the `.env` file > plain fallback variables (ANTHROPIC_API_KEY,
    REDIS_*) from the environment, then from `.env` > defaults.

    Args:
        config_path: Optional path to config file. Defaults to ~/.toolsift-agent/config.json.
        environ: Environment used for the fallback variables. Defaults to os.environ.
        env_file: Dotenv file to read. Defaults to `.env` in the working directory.

    Returns:
        Loaded configuration.

    Raises:
        ConfigurationError: A setting has a value of the wrong type.
    """
    path = config_path or DEFAULT_CONFIG_FILE
    dotenv_path = env_file or DEFAULT_ENV_FILE

    env: dict[str, str] = {}
    if dotenv_path.is_file():
        env.update({k: v for k, v in dotenv_values(dotenv_path).items() if v is not None})
        logger.debug(f"Environment file loaded from {dotenv_path}")
    env.update(os.environ if environ is None else environ)

    data: dict = {}
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            logger.debug(f"Config loaded from {path}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config from {path}: {e}, using defaults")
            data = {}

    try:
        config = Config(_env_file=dotenv_path, **data)
        return _apply_env_fallbacks(config, env)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _apply_env_fallbacks(config: Config, env: Mapping[str, str]) -> Config:
    """Fill unset fields from the plain environment variable names."""
    llm_defaults = type(config.llm)()
    llm_update = {
        field: env[var]
        for field, var in LLM_ENV_FALLBACKS.items()
        if env.get(var) and getattr(config.llm, field) == getattr(llm_defaults, field)
    }

    server_defaults = type(config.tool_server)()
    server_update = {
        field: env[var]
        for field, var in TOOL_SERVER_ENV_FALLBACKS.items()
        if env.get(var) and getattr(config.tool_server, field) == getattr(server_defaults, field)
    }
    if "port" in server_update:
        try:
            server_update["port"] = int(server_update["port"])
        except ValueError:
            raise ConfigurationError(
                f"REDIS_PORT must be an integer, got {server_update['port']!r}"
            ) from None

    if not llm_update and not server_update:
        return config

    return config.model_copy(
        update={
            "llm": config.llm.model_copy(update=llm_update),
            "tool_server": config.tool_server.model_copy(update=server_update),
        }
    )
