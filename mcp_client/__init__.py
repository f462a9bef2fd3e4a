"""Chat client that lets a hosted model call the tools of an MCP server."""

from mcp_client.client import MCPClient
from mcp_client.config import ClientConfig
from mcp_client.orchestrator import QueryOrchestrator
from mcp_client.transport import ConnectionMode, create_connection

__all__ = ["MCPClient", "ClientConfig", "QueryOrchestrator", "ConnectionMode", "create_connection"]
