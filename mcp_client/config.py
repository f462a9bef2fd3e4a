"""Environment-driven configuration for the MCP chat client."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from mcp_client.errors import ConfigError

DEFAULT_API_BASE = "https://api.deepseek.com/v1"
DEFAULT_MODEL = "deepseek-chat"
MAX_TOKENS = 1000


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    api_base: str = DEFAULT_API_BASE
    model: str = DEFAULT_MODEL
    max_tokens: int = MAX_TOKENS
    server_url: str = ""
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        Build the configuration from environment variables.

        When ``environ`` is omitted, a ``.env`` file in the working directory
        is loaded first and ``os.environ`` is used.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        api_key = environ.get("OPENAI_API_KEY", "")
        if not api_key:
            raise ConfigError("OPENAI_API_KEY is not set")

        return cls(
            api_key=api_key,
            api_base=environ.get("DEEPSEEK_API_BASE") or DEFAULT_API_BASE,
            model=environ.get("DEEPSEEK_MODEL") or DEFAULT_MODEL,
            server_url=environ.get("MCP_SERVER_URL", ""),
            log_level=environ.get("LOG_LEVEL", "info"),
        )
