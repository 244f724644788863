"""Configuration schema using Pydantic."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from toolsift_agent.exceptions import ConfigurationError


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    api_key: str = ""
    api_base: str | None = None
    model: str = "anthropic/claude-3-5-sonnet-20241022"
    max_tokens: int = 1000
    temperature: float = 0.0


class ToolServerConfig(BaseModel):
    """MCP tool server connection configuration."""

    # stdio bridge: `docker run --rm -i ... <image>` unless `args` overrides it
    command: str = "docker"
    args: list[str] | None = None
    image: str = "mcp/redis"
    container_name: str = "redis-mcp-server"
    host: str = "localhost"
    port: int = 6379
    username: str = ""
    password: str = ""

    request_timeout: float = 30.0
    settle_delay: float = 0.0

    def bridge_argv(self) -> list[str]:
        """Build the argv used to spawn the stdio bridge."""
        if self.args is not None:
            return [self.command, *self.args]
        return [
            self.command,
            "run",
            "--rm",
            "--name",
            self.container_name,
            "-i",
            "-e",
            f"REDIS_HOST={self.host}",
            "-e",
            f"REDIS_PORT={self.port}",
            "-e",
            f"REDIS_USERNAME={self.username}",
            "-e",
            f"REDIS_PWD={self.password}",
            self.image,
        ]


class Config(BaseSettings):
    """Root configuration for toolsift-agent."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    tool_server: ToolServerConfig = Field(default_factory=ToolServerConfig)
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="TOOLSIFT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment variables take priority over values loaded from the config file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def require_api_key(self) -> str:
        """Return the LLM API key or raise ConfigurationError when it is unset."""
        if not self.llm.api_key:
            raise ConfigurationError(
                "No LLM API key configured. Set ANTHROPIC_API_KEY or TOOLSIFT_LLM__API_KEY."
            )
        return self.llm.api_key
