"""MCP server with National Weather Service lookups and an installed-apps listing."""
