"""Exceptions raised by the MCP chat client."""


class ClientError(Exception):
    """Base class for client errors."""


class ConfigError(ClientError):
    """Required configuration is missing or invalid."""


class ConnectionFailed(ClientError):
    """The transport could not be established or the handshake failed."""


class UnsupportedScriptType(ClientError):
    """A local server script has an extension we cannot launch."""


class InvalidConnectionMode(ClientError):
    """A remote connection was requested with a mode other than WebSocket or SSE."""


class InvalidServerUrl(ClientError):
    """A remote server URL is missing its scheme or host."""


class ToolArgumentParseError(ClientError):
    """Tool call arguments are not a JSON object."""


class ToolInvocationError(ClientError):
    """The MCP server reported that the tool itself failed."""
