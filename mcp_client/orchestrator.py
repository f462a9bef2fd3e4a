"""
Turns one user query into display text.

The model gets the tool catalog once. Every tool call it asks for is run
against the MCP server, followed by one follow-up model call without tools,
so tool use never chains past a single round.
"""

import json
import logging
from typing import Any, List, Optional, Sequence

from mcp_client.errors import ToolInvocationError
from mcp_client.messages import (
    AssistantMessage,
    Conversation,
    ToolCallRequest,
    ToolMessage,
    UserMessage,
    assistant_from_completion,
)
from mcp_client.tools import ToolDescriptor, normalize_tool_content, parse_tool_arguments

logger = logging.getLogger(__name__)


async def invoke_tool(connection: Any, name: str, arguments: dict) -> str:
    """Call a tool on the MCP server and return its content as one string."""
    result = await connection.call_tool(name, arguments)
    text = normalize_tool_content(result.content)
    if getattr(result, "isError", False):
        raise ToolInvocationError(text or f"tool {name} reported an error")
    return text


class QueryOrchestrator:
    def __init__(
        self,
        llm: Any,
        connection: Any,
        tools: Sequence[ToolDescriptor],
        model: str,
        max_tokens: int = 1000,
    ):
        """
        Args:
            llm: an ``openai.AsyncOpenAI`` (or compatible) client
            connection: the connected MCP server (see ``transport.MCPConnection``)
            tools: the catalog listed at connect time
            model: chat-completion model name
            max_tokens: response budget for every model call
        """
        self.llm = llm
        self.connection = connection
        self.tools = tuple(tools)
        self.model = model
        self.max_tokens = max_tokens

    async def _complete(self, conversation: Conversation, with_tools: bool) -> Optional[AssistantMessage]:
        params = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": conversation.to_openai(),
        }
        if with_tools and self.tools:
            params["tools"] = [t.to_openai() for t in self.tools]
        response = await self.llm.chat.completions.create(**params)
        if not response.choices:
            return None
        return assistant_from_completion(response.choices[0].message)

    async def process_query(self, query: str, conversation: Optional[Conversation] = None) -> str:
        if conversation is None:
            conversation = Conversation()
        conversation.append(UserMessage(query))

        logger.debug("Sending query to %s: %s", self.model, query)
        reply = await self._complete(conversation, with_tools=True)
        if reply is None:
            logger.warning("Model returned no choices for query")
            return ""

        final_text: List[str] = []
        if reply.content:
            final_text.append(reply.content)

        for call in reply.tool_calls:
            try:
                await self._run_tool_call(conversation, reply, call, final_text)
            except Exception as e:
                logger.warning("Tool %s failed: %s", call.name, e)
                final_text.append(f"[Error] tool {call.name} failed: {e}")

        return "\n".join(final_text)

    async def _run_tool_call(
        self,
        conversation: Conversation,
        reply: AssistantMessage,
        call: ToolCallRequest,
        out: List[str],
    ) -> None:
        args = parse_tool_arguments(call.name, call.arguments_json)
        content = await invoke_tool(self.connection, call.name, args)
        out.append(f"[Calling tool {call.name} with args {json.dumps(args)}]")

        # each tool message must directly follow an assistant message carrying its call
        conversation.append(AssistantMessage(content=reply.content, tool_calls=(call,)))
        conversation.append(ToolMessage(tool_call_id=call.id, name=call.name, content=content))

        follow_up = await self._complete(conversation, with_tools=False)
        if follow_up is not None and follow_up.content:
            out.append(follow_up.content)
