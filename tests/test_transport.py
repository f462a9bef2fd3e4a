"""Tests for transport selection and connection failures."""

import sys
from contextlib import asynccontextmanager

import pytest

from mcp_client.errors import ConnectionFailed, InvalidConnectionMode, InvalidServerUrl, UnsupportedScriptType
from mcp_client.transport import (
    ConnectionMode,
    MCPConnection,
    SSEConnection,
    StdioConnection,
    WebSocketConnection,
    create_connection,
    create_remote_connection,
    interpreter_for,
)


def test_python_script_uses_current_interpreter():
    connection = create_connection("weather/server.py")

    assert isinstance(connection, StdioConnection)
    assert connection.params.command == sys.executable
    assert connection.params.args == ["weather/server.py"]


def test_js_script_uses_node():
    assert interpreter_for("build/index.js") == "node"


@pytest.mark.parametrize("path", ["server.sh", "server", "server.ts"])
def test_unsupported_script_type(path):
    with pytest.raises(UnsupportedScriptType):
        create_connection(path)


def test_remote_modes():
    assert isinstance(create_remote_connection("ws://localhost:8000/mcp", ConnectionMode.WEBSOCKET), WebSocketConnection)
    assert isinstance(create_connection("http://localhost:8000/sse", ConnectionMode.SSE), SSEConnection)
    assert isinstance(create_remote_connection("http://localhost:8000/sse", "sse"), SSEConnection)


def test_invalid_remote_mode():
    with pytest.raises(InvalidConnectionMode):
        create_remote_connection("ws://localhost:8000/mcp", ConnectionMode.LOCAL_SCRIPT)
    with pytest.raises(InvalidConnectionMode):
        create_remote_connection("ws://localhost:8000/mcp", "grpc")


def test_invalid_url():
    with pytest.raises(InvalidServerUrl):
        create_remote_connection("localhost", ConnectionMode.WEBSOCKET)


class RefusingConnection(MCPConnection):
    mode = ConnectionMode.WEBSOCKET

    def describe(self):
        return "ws://refused"

    @asynccontextmanager
    async def _transport(self):
        raise OSError("connection refused")
        yield


@pytest.mark.anyio
async def test_connect_failure_raises_connection_failed():
    connection = RefusingConnection()

    with pytest.raises(ConnectionFailed, match="connection refused"):
        await connection.connect()
    assert connection.session is None


@pytest.mark.anyio
async def test_calls_before_connect_fail():
    with pytest.raises(ConnectionFailed):
        await RefusingConnection().list_tools()


def test_connection_variants_must_provide_a_transport():
    class Incomplete(MCPConnection):
        mode = ConnectionMode.SSE

        def describe(self):
            return "incomplete"

    with pytest.raises(TypeError):
        MCPConnection()
    with pytest.raises(TypeError):
        Incomplete()
