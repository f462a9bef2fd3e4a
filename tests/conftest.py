import copy
from types import SimpleNamespace

import pytest
from mcp.types import CallToolResult, TextContent
from openai.types.chat import ChatCompletion


@pytest.fixture
def anyio_backend():
    return "asyncio"


def completion(content=None, tool_calls=(), choices=True):
    """Build a real ChatCompletion; tool_calls are (id, name, arguments) tuples."""
    message = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = [
            {"id": call_id, "type": "function", "function": {"name": name, "arguments": args}}
            for call_id, name, args in tool_calls
        ]
    return ChatCompletion.model_validate({
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "deepseek-chat",
        "choices": [
            {"index": 0, "finish_reason": "tool_calls" if tool_calls else "stop", "message": message}
        ] if choices else [],
    })


def text_result(text, is_error=False):
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


class FakeLLM:
    """Stands in for AsyncOpenAI: replays canned responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **params):
        self.requests.append(copy.deepcopy(params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeConnection:
    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []
        self.closed = False

    async def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        result = self.results.get(name)
        if isinstance(result, Exception):
            raise result
        return result if result is not None else text_result(f"{name} result")

    async def close(self):
        self.closed = True


@pytest.fixture
def make_completion():
    return completion


@pytest.fixture
def make_result():
    return text_result


@pytest.fixture
def llm_factory():
    return FakeLLM


@pytest.fixture
def connection_factory():
    return FakeConnection
