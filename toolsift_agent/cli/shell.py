"""Interactive shell: read queries from stdin and print the answers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from loguru import logger
from rich.console import Console
from rich.markup import escape

from toolsift_agent.exceptions import ToolServerConnectionError
from toolsift_agent.session.manager import ChatSession
from toolsift_agent.utils.helpers import format_error

QUIT_COMMAND = "quit"
TOOLS_COMMAND = "tools"


class ChatShell:
    """
    Line-oriented REPL over a started ChatSession.

    `quit` ends the loop, `tools` prints the catalog without contacting the
    model or the tool server, and every other line (blank ones included) is
    sent as a query. A failing query is reported and the shell keeps reading;
    a lost tool server connection ends the shell.

    Lines are read on the main thread between queries, so Ctrl+C or SIGTERM
    at the prompt interrupts the read directly. Each query runs to completion
    on `loop`, the loop that owns the session's connection.
    """

    def __init__(
        self,
        session: ChatSession,
        console: Console,
        loop: asyncio.AbstractEventLoop,
        read_line: Callable[[str], str] | None = None,
    ) -> None:
        self.session = session
        self.console = console
        self.loop = loop
        self._read_line = read_line or console.input

    def run(self) -> None:
        self.console.print("\n[bold]MCP Client Started![/bold]")
        self.console.print(f"Type your queries or '{QUIT_COMMAND}' to exit.")
        self.console.print(f"Type '{TOOLS_COMMAND}' to see a list of available tools.")

        while True:
            try:
                line = self._read_line("\n[bold blue]Query:[/bold blue] ")
            except (KeyboardInterrupt, EOFError):
                break

            command = line.strip().lower()
            if command == QUIT_COMMAND:
                break
            if command == TOOLS_COMMAND:
                self.console.print(self.session.catalog.describe(), markup=False, highlight=False)
                continue

            self.loop.run_until_complete(self.handle_query(line))

        self.console.print("\n[dim]Goodbye![/dim]")

    async def handle_query(self, query: str) -> None:
        try:
            response = await self.session.process_query(query)
        except ToolServerConnectionError:
            raise
        except Exception as e:
            logger.error(f"Query failed: {format_error(e)}")
            self.console.print(f"\n[red]Error:[/red] {escape(format_error(e))}")
            return
        self.console.print("\n" + response, markup=False, highlight=False)
