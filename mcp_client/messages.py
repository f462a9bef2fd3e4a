"""
Conversation messages exchanged with the chat-completion provider.

Provider responses are converted into these types as soon as they are
received, so the rest of the client never touches the SDK's raw objects.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union


@dataclass(frozen=True)
class ToolCallRequest:
    """A function call the model asked for."""
    id: str
    name: str
    arguments_json: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments_json},
        }


@dataclass(frozen=True)
class UserMessage:
    content: str
    role: str = field(default="user", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class AssistantMessage:
    content: Optional[str] = None
    tool_calls: tuple = ()
    role: str = field(default="assistant", init=False)

    def to_dict(self) -> Dict[str, Any]:
        msg: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            msg["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        elif msg["content"] is None:
            msg["content"] = ""
        return msg


@dataclass(frozen=True)
class ToolMessage:
    tool_call_id: str
    name: str
    content: str
    role: str = field(default="tool", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "tool_call_id": self.tool_call_id,
            "name": self.name,
            "content": self.content,
        }


Message = Union[UserMessage, AssistantMessage, ToolMessage]


class Conversation:
    """Append-only sequence of messages for a single query."""

    def __init__(self, messages: Optional[List[Message]] = None):
        self._messages: List[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        self._messages.append(message)

    def to_openai(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self._messages]

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]


def assistant_from_completion(message: Any) -> AssistantMessage:
    """
    Convert the SDK's ``choices[i].message`` into an AssistantMessage.

    Only function tool calls are kept; other tool call kinds are not
    something an MCP server can satisfy.
    """
    calls = []
    for call in getattr(message, "tool_calls", None) or []:
        function = getattr(call, "function", None)
        if getattr(call, "type", "function") != "function" or function is None:
            continue
        calls.append(ToolCallRequest(
            id=call.id,
            name=function.name,
            arguments_json=function.arguments or "",
        ))
    content = getattr(message, "content", None) or None
    return AssistantMessage(content=content, tool_calls=tuple(calls))
