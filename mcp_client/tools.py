"""Tool catalog and tool-call helpers shared by the orchestrator and the chat loop."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from mcp_client.errors import ToolArgumentParseError


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool listed by the MCP server, in the shape the model API needs."""
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mcp(cls, tool: Any) -> "ToolDescriptor":
        return cls(
            name=tool.name,
            description=tool.description or "",
            input_schema=dict(tool.inputSchema or {}),
        )

    def to_openai(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


def build_tool_catalog(tools: Iterable[Any]) -> List[ToolDescriptor]:
    """Map the server's tool list into descriptors, one per tool."""
    return [ToolDescriptor.from_mcp(t) for t in tools]


def parse_tool_arguments(tool_name: str, payload: Optional[str]) -> Dict[str, Any]:
    """Decode a tool call's JSON arguments; a missing payload means no arguments."""
    if payload is None or not payload.strip():
        return {}
    try:
        args = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ToolArgumentParseError(f"invalid JSON arguments for {tool_name}: {e}") from e
    if not isinstance(args, dict):
        raise ToolArgumentParseError(f"arguments for {tool_name} must be a JSON object")
    return args


def _segment_text(segment: Any) -> str:
    if isinstance(segment, dict):
        if "text" in segment:
            return str(segment["text"])
        return json.dumps(segment)
    text = getattr(segment, "text", None)
    if text is not None:
        return text
    if hasattr(segment, "model_dump"):
        return json.dumps(segment.model_dump(mode="json"))
    return json.dumps(segment, default=str)


def normalize_tool_content(content: Any) -> str:
    """Flatten a tool result's content into one string."""
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        return "\n".join(_segment_text(s) for s in content)
    return json.dumps(content, default=str)
