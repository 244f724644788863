"""CLI commands for toolsift-agent."""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from toolsift_agent.cli.shell import ChatShell
from toolsift_agent.config import Config, load_config
from toolsift_agent.exceptions import ConfigurationError, ToolServerConnectionError
from toolsift_agent.providers.base import LLMProvider
from toolsift_agent.providers.litellm_provider import LiteLLMProvider
from toolsift_agent.session.manager import ChatSession

app = typer.Typer(
    name="toolsift-agent",
    help="toolsift-agent: chat with an LLM that picks the MCP tools each query needs",
)
console = Console()


def setup_logging(level: str) -> None:
    """Send loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _terminate(signum, frame) -> None:
    raise KeyboardInterrupt


def _run_chat(config: Config, provider: LLMProvider) -> int:
    session = ChatSession.from_config(config, provider)
    loop = asyncio.new_event_loop()
    try:
        loop.run_until_complete(session.start())
        ChatShell(session, console, loop).run()
    except ToolServerConnectionError as e:
        logger.error(f"Tool server connection failed: {e}")
        console.print(f"[red]Error:[/red] Tool server connection failed: {e}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[dim]Goodbye![/dim]")
    finally:
        _shutdown(loop, session)
    return 0


def _shutdown(loop: asyncio.AbstractEventLoop, session: ChatSession) -> None:
    """Cancel an interrupted query, close the session once and close the loop."""
    try:
        pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.run_until_complete(session.close())
        loop.run_until_complete(loop.shutdown_asyncgens())
    finally:
        loop.close()


@app.command()
def chat(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """Chat with the LLM using the tools exposed by the MCP server."""
    try:
        config = load_config(config_path)
        setup_logging(config.log_level)
        api_key = config.require_api_key()
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    provider = LiteLLMProvider(
        api_key=api_key,
        api_base=config.llm.api_base,
        default_model=config.llm.model,
    )

    previous_handler = signal.signal(signal.SIGTERM, _terminate)
    try:
        code = _run_chat(config, provider)
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    raise typer.Exit(code)


if __name__ == "__main__":
    app()
