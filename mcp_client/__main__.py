from mcp_client.client import run

run()
