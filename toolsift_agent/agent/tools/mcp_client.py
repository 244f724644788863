"""MCP client speaking JSON-RPC over the stdin/stdout of a server subprocess."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any, Protocol

from loguru import logger

from toolsift_agent import __version__
from toolsift_agent.config.schema import ToolServerConfig
from toolsift_agent.exceptions import ToolServerConnectionError

PROTOCOL_VERSION = "2024-11-05"

MessageHandler = Callable[[dict[str, Any]], None]
CloseHandler = Callable[[str], None]


class MCPError(RuntimeError):
    """A JSON-RPC error or timeout reported for a single MCP request."""

    def __init__(self, message: str, code: int | None = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


class Transport(Protocol):
    """Moves JSON-RPC messages between the client and the server."""

    async def start(self, on_message: MessageHandler, on_close: CloseHandler) -> None: ...

    async def send(self, message: dict[str, Any]) -> None: ...

    async def close(self) -> None: ...


class StdioTransport:
    """
    Spawns the MCP server as a subprocess and exchanges newline-delimited
    JSON-RPC messages over its stdin/stdout.
    """

    def __init__(self, argv: list[str], env: dict[str, str] | None = None) -> None:
        self._argv = argv
        self._env = env
        self._process: asyncio.subprocess.Process | None = None
        self._reader_task: asyncio.Task | None = None
        self._stderr_task: asyncio.Task | None = None

    async def start(self, on_message: MessageHandler, on_close: CloseHandler) -> None:
        if self._process is not None:
            return

        logger.info(f"Starting MCP server: {' '.join(self._argv)}")
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._env,
            )
        except OSError as e:
            raise ToolServerConnectionError(f"Failed to start MCP server '{self._argv[0]}': {e}") from e

        self._reader_task = asyncio.create_task(self._read_responses(on_message, on_close))
        self._stderr_task = asyncio.create_task(self._drain_stderr())

    async def send(self, message: dict[str, Any]) -> None:
        if self._process is None or self._process.stdin is None:
            raise ToolServerConnectionError("MCP server not started")

        line = json.dumps(message) + "\n"
        try:
            self._process.stdin.write(line.encode())
            await self._process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise ToolServerConnectionError(f"MCP server pipe closed: {e}") from e

    async def _read_responses(self, on_message: MessageHandler, on_close: CloseHandler) -> None:
        """Background task to read JSON-RPC messages from stdout."""
        if self._process is None or self._process.stdout is None:
            return

        while True:
            line = await self._process.stdout.readline()
            if not line:
                break
            text = line.decode().strip()
            if not text:
                continue
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                logger.debug(f"MCP server wrote non-JSON output: {text}")
                continue
            on_message(data)

        on_close("MCP server closed its output stream")

    async def _drain_stderr(self) -> None:
        if self._process is None or self._process.stderr is None:
            return
        while True:
            line = await self._process.stderr.readline()
            if not line:
                break
            logger.debug(f"MCP server stderr: {line.decode(errors='replace').rstrip()}")

    async def close(self) -> None:
        for task in (self._reader_task, self._stderr_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._reader_task = None
        self._stderr_task = None

        if self._process:
            if self._process.returncode is None:
                self._process.terminate()
                try:
                    await asyncio.wait_for(self._process.wait(), timeout=5.0)
                except asyncio.TimeoutError:
                    self._process.kill()
            self._process = None


class MCPClient:
    """
    Manages one connection to an MCP server.

    Correlates JSON-RPC requests and responses by id, performs the
    `initialize` handshake and exposes `tools/list` and `tools/call`.
    """

    def __init__(self, transport: Transport, request_timeout: float = 30.0) -> None:
        self._transport = transport
        self._request_timeout = request_timeout
        self._request_id = 0
        self._pending: dict[int, asyncio.Future] = {}
        self._started = False
        self._initialized = False
        self.server_info: dict[str, Any] = {}

    @classmethod
    def from_config(cls, config: ToolServerConfig) -> MCPClient:
        """Build a client that spawns the configured stdio bridge."""
        return cls(StdioTransport(config.bridge_argv()), request_timeout=config.request_timeout)

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def start(self) -> None:
        """Open the transport and run the initialize handshake."""
        if self._started:
            return

        await self._transport.start(self._handle_message, self._handle_closed)
        self._started = True
        await self._initialize()
        logger.info("MCP server started and initialized")

    async def _initialize(self) -> None:
        """Send MCP initialize handshake."""
        result = await self._send_request("initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": {"name": "toolsift-agent", "version": __version__},
        })
        self.server_info = result.get("serverInfo", {})
        logger.debug(f"MCP server info: {self.server_info}")

        await self._send_notification("notifications/initialized", {})
        self._initialized = True

    async def list_tools(self) -> list[dict[str, Any]]:
        """List available tools from the MCP server, following pagination cursors."""
        self._ensure_connected()

        tools: list[dict[str, Any]] = []
        params: dict[str, Any] = {}
        while True:
            result = await self._send_request("tools/list", params)
            tools.extend(result.get("tools", []))
            cursor = result.get("nextCursor")
            if not cursor:
                break
            params = {"cursor": cursor}
        return tools

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Call an MCP tool.

        Args:
            name: Tool name as listed by the server.
            arguments: Tool-specific arguments.

        Returns:
            The raw `tools/call` result ({"content": [...], "isError": ...}).
        """
        self._ensure_connected()

        return await self._send_request("tools/call", {
            "name": name,
            "arguments": arguments or {},
        })

    def _ensure_connected(self) -> None:
        if not self._initialized:
            raise ToolServerConnectionError("MCP server is not connected")

    async def _send_request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """Send a JSON-RPC request and wait for response."""
        self._request_id += 1
        request_id = self._request_id

        message = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params,
        }

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future

        try:
            await self._transport.send(message)
            return await asyncio.wait_for(future, timeout=self._request_timeout)
        except asyncio.TimeoutError:
            raise MCPError(f"MCP request timed out: {method}")
        finally:
            self._pending.pop(request_id, None)

    async def _send_notification(self, method: str, params: dict[str, Any]) -> None:
        """Send a JSON-RPC notification (no response expected)."""
        message = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
        }
        await self._transport.send(message)

    def _handle_message(self, data: dict[str, Any]) -> None:
        """Resolve the pending request a server message answers."""
        if "id" in data and data["id"] in self._pending:
            future = self._pending.pop(data["id"])
            if future.done():
                return
            if "error" in data:
                error = data["error"] or {}
                future.set_exception(
                    MCPError(
                        f"MCP error: {error.get('message', error)}",
                        code=error.get("code"),
                        data=error.get("data"),
                    )
                )
            else:
                future.set_result(data.get("result", {}))
        elif "method" in data and "id" not in data:
            logger.debug(f"MCP notification: {data['method']}")
        else:
            logger.debug(f"Ignoring unexpected MCP message: {data}")

    def _handle_closed(self, reason: str) -> None:
        """Fail every request still waiting for an answer."""
        logger.warning(reason)
        for future in self._pending.values():
            if not future.done():
                future.set_exception(ToolServerConnectionError(reason))
        self._pending.clear()
        self._initialized = False

    async def stop(self) -> None:
        """Close the transport."""
        await self._transport.close()
        self._pending.clear()
        self._started = False
        self._initialized = False
        logger.info("MCP server connection closed")
