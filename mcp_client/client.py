# mcp_client/client.py
# MCP chat client: connects to an MCP server, lets a DeepSeek/OpenAI-compatible
# model call its tools, and runs an interactive chat loop.
#
# Usage:
#   mcp-client weather/server.py            (local server script, .py or .js)
#   mcp-client --ws ws://host:port/mcp      (WebSocket server)
#   mcp-client --sse http://host:port/sse   (SSE server)
# Then type questions, "tool:<name> {json args}" to call a tool directly,
# or "quit" to leave.

import asyncio
import logging
import sys
from typing import Any, Callable, List, Optional

from openai import AsyncOpenAI

from mcp_client.config import ClientConfig
from mcp_client.errors import ClientError, ConnectionFailed, ToolArgumentParseError
from mcp_client.logs import LogSettings, setup_logging
from mcp_client.orchestrator import QueryOrchestrator, invoke_tool
from mcp_client.tools import ToolDescriptor, build_tool_catalog, parse_tool_arguments
from mcp_client.transport import ConnectionMode, MCPConnection, create_connection, create_remote_connection

logger = logging.getLogger(__name__)

USAGE = """Usage:
  1. Local script:      mcp-client <path_to_server_script>
  2. WebSocket server:  mcp-client --ws <server_url>
  3. SSE server:        mcp-client --sse <server_url>"""

DIRECT_TOOL_PREFIX = "tool:"


class MCPClient:
    def __init__(self, config: ClientConfig, llm: Any = None):
        self.config = config
        self.llm = llm or AsyncOpenAI(api_key=config.api_key, base_url=config.api_base)
        self.connection: Optional[MCPConnection] = None
        self.tools: List[ToolDescriptor] = []
        self.orchestrator: Optional[QueryOrchestrator] = None

    async def connect_to_server(self, server_script_path: str) -> None:
        """Launch a local server script (.py or .js) and connect over stdio."""
        await self._connect(create_connection(server_script_path, ConnectionMode.LOCAL_SCRIPT))

    async def connect_to_remote_server(self, server_url: str, mode: ConnectionMode) -> None:
        """Connect to a running server over WebSocket or SSE."""
        await self._connect(create_remote_connection(server_url, mode))

    async def _connect(self, connection: MCPConnection) -> None:
        self.connection = connection
        await connection.connect()
        try:
            tools = await connection.list_tools()
        except Exception as e:
            raise ConnectionFailed(f"failed to list tools: {e}") from e

        self.tools = build_tool_catalog(tools)
        self.orchestrator = QueryOrchestrator(
            self.llm,
            connection,
            self.tools,
            model=self.config.model,
            max_tokens=self.config.max_tokens,
        )
        print("Connected to server, available tools:", [t.name for t in self.tools])

    async def process_query(self, query: str) -> str:
        if self.orchestrator is None:
            raise ConnectionFailed("not connected to an MCP server")
        return await self.orchestrator.process_query(query)

    async def call_tool_directly(self, command: str) -> str:
        """Handle ``<name> [json-args]``, the part after ``tool:``, without the model."""
        if self.connection is None:
            raise ConnectionFailed("not connected to an MCP server")
        parts = command.strip().split(maxsplit=1)
        if not parts:
            raise ToolArgumentParseError("usage: tool:<name> [json-args]")
        name = parts[0]
        args = parse_tool_arguments(name, parts[1] if len(parts) > 1 else None)
        return await invoke_tool(self.connection, name, args)

    async def handle_line(self, line: str) -> str:
        if line.startswith(DIRECT_TOOL_PREFIX):
            return await self.call_tool_directly(line[len(DIRECT_TOOL_PREFIX):])
        return await self.process_query(line)

    async def chat_loop(self, read_line: Callable[[str], str] = input) -> None:
        print("\nMCP client started!")
        print("Type your question, tool:<name> [json-args], or 'quit' to exit.")

        while True:
            try:
                line = read_line("\nQuery: ").strip()
            except (EOFError, KeyboardInterrupt):
                break
            if not line:
                continue
            if line.lower() == "quit":
                break

            try:
                response = await self.handle_line(line)
                print("\n" + response)
            except Exception as e:
                logger.debug("Query failed", exc_info=True)
                print(f"\n[Error] {e}")

    async def cleanup(self) -> None:
        if self.connection is not None:
            await self.connection.close()
            self.connection = None
        close = getattr(self.llm, "close", None)
        if close is not None:
            await close()


async def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    config = ClientConfig.from_env()
    setup_logging(LogSettings.from_name(config.log_level))

    client = MCPClient(config)
    try:
        if not argv:
            print(USAGE)
            if not config.server_url:
                return 1
            print("\nMCP_SERVER_URL is set, connecting over WebSocket...")
            await client.connect_to_remote_server(config.server_url, ConnectionMode.WEBSOCKET)
        elif argv[0] in ("--ws", "--websocket", "--sse"):
            if len(argv) < 2:
                raise ClientError(f"Missing server URL after {argv[0]}")
            mode = ConnectionMode.SSE if argv[0] == "--sse" else ConnectionMode.WEBSOCKET
            await client.connect_to_remote_server(argv[1], mode)
        else:
            await client.connect_to_server(argv[0])

        await client.chat_loop()
    finally:
        await client.cleanup()
    return 0


def run() -> None:
    try:
        code = asyncio.run(main())
    except ClientError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception:
        logger.exception("Unhandled error, exiting")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    run()
