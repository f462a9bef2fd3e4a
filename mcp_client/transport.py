"""
Connections to an MCP server.

One of three variants is built per client process, chosen by
``ConnectionMode``:

    StdioConnection       launches a local .py / .js server script
    WebSocketConnection   ws:// or wss:// endpoint
    SSEConnection         http(s) Server-Sent-Events endpoint

All of them expose ``connect``, ``list_tools``, ``call_tool`` and ``close``.
"""

import logging
import sys
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from mcp import ClientSession
from mcp.client.sse import sse_client
from mcp.client.stdio import StdioServerParameters, stdio_client
from mcp.client.websocket import websocket_client
from mcp.types import CallToolResult, Tool

from mcp_client.errors import ConnectionFailed, InvalidConnectionMode, InvalidServerUrl, UnsupportedScriptType

logger = logging.getLogger(__name__)


class ConnectionMode(str, Enum):
    LOCAL_SCRIPT = "local_script"
    WEBSOCKET = "websocket"
    SSE = "sse"


class MCPConnection(ABC):
    """Base class: owns the transport streams and the MCP client session."""

    mode: ConnectionMode

    def __init__(self) -> None:
        self._stack = AsyncExitStack()
        self.session: Optional[ClientSession] = None

    @abstractmethod
    def describe(self) -> str:
        """Human-readable target, used in logs and errors."""

    @abstractmethod
    def _transport(self):
        """Return an async context manager yielding (read_stream, write_stream)."""

    async def connect(self) -> None:
        logger.info("Connecting to MCP server (%s): %s", self.mode.value, self.describe())
        try:
            read, write = await self._stack.enter_async_context(self._transport())
            session = await self._stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except Exception as e:
            logger.error("Failed to connect to MCP server %s: %s", self.describe(), e)
            await self._stack.aclose()
            raise ConnectionFailed(f"could not connect to {self.describe()}: {e}") from e
        self.session = session

    def _require_session(self) -> ClientSession:
        if self.session is None:
            raise ConnectionFailed("not connected to an MCP server")
        return self.session

    async def list_tools(self) -> List[Tool]:
        result = await self._require_session().list_tools()
        return list(result.tools)

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> CallToolResult:
        logger.debug("Calling tool %s with %s", name, arguments)
        return await self._require_session().call_tool(name, arguments)

    async def close(self) -> None:
        await self._stack.aclose()
        self.session = None


class StdioConnection(MCPConnection):
    mode = ConnectionMode.LOCAL_SCRIPT

    def __init__(self, script_path: str):
        super().__init__()
        self.script_path = script_path
        self.params = StdioServerParameters(
            command=interpreter_for(script_path),
            args=[script_path],
            env=None,
        )

    def describe(self) -> str:
        return self.script_path

    def _transport(self):
        return stdio_client(self.params)


class WebSocketConnection(MCPConnection):
    mode = ConnectionMode.WEBSOCKET

    def __init__(self, url: str):
        super().__init__()
        self.url = validate_url(url)

    def describe(self) -> str:
        return self.url

    def _transport(self):
        return websocket_client(self.url)


class SSEConnection(MCPConnection):
    mode = ConnectionMode.SSE

    def __init__(self, url: str):
        super().__init__()
        self.url = validate_url(url)

    def describe(self) -> str:
        return self.url

    def _transport(self):
        return sse_client(self.url)


def interpreter_for(script_path: str) -> str:
    """Pick the command that runs a server script, by file extension."""
    suffix = Path(script_path).suffix.lower()
    if suffix == ".py":
        return sys.executable or ("python" if sys.platform == "win32" else "python3")
    if suffix in (".js", ".mjs", ".cjs"):
        return "node"
    raise UnsupportedScriptType(f"Server script must be a .js or .py file: {script_path}")


def validate_url(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidServerUrl(f"Invalid server URL: {url!r}")
    return url


def create_connection(target: str, mode: Any = ConnectionMode.LOCAL_SCRIPT) -> MCPConnection:
    """Build the connection variant for ``mode``; nothing is opened yet."""
    if mode == ConnectionMode.LOCAL_SCRIPT:
        return StdioConnection(target)
    return create_remote_connection(target, mode)


def create_remote_connection(url: str, mode: Any) -> MCPConnection:
    if mode == ConnectionMode.WEBSOCKET:
        return WebSocketConnection(url)
    if mode == ConnectionMode.SSE:
        return SSEConnection(url)
    raise InvalidConnectionMode(f"Invalid connection mode for a remote server: {mode!r}")
