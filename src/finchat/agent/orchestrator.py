"""Main orchestration loop: model round -> tool round -> ... -> final answer."""

from __future__ import annotations

import asyncio
import logging
from typing import (
    Any,
    Dict,
    List,
)

from finchat.agent.planner_interface import BaseChatBackend
from finchat.agent.prompts import (
    EMPTY_ANSWER,
    ROUND_LIMIT_ANSWER,
    SYSTEM_PROMPT,
)
from finchat.agent.tool_executor import execute_tool
from finchat.config import settings
from finchat.core.schema import (
    ModelReply,
    Role,
    ToolInvocation,
    Turn,
)
from finchat.memory.conversation_store import ConversationStore
from finchat.tools import get_tool_schemas

logger = logging.getLogger(__name__)


class Orchestrator:
    """Drives the multi-round exchange between the model and the data fetchers.

    One call to :meth:`answer` is one exchange: it reads the recency window of the conversation,
    loops over model rounds until the model stops requesting tools (or the round cap is hit),
    and only then appends the user and assistant turns to the store.
    """

    def __init__(
        self,
        backend: BaseChatBackend,
        store: ConversationStore,
        *,
        max_rounds: int | None = None,
        context_window: int | None = None,
        parallel_tools: bool | None = None,
        temperature: float | None = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.backend = backend
        self.store = store
        # Unset limits fall back to the configured ones
        self.max_rounds = max_rounds if max_rounds is not None else settings.MAX_TOOL_ROUNDS
        self.context_window = (
            context_window if context_window is not None else settings.CONTEXT_WINDOW
        )
        self.parallel_tools = (
            parallel_tools if parallel_tools is not None else settings.PARALLEL_TOOL_CALLS
        )
        self.temperature = temperature if temperature is not None else settings.TEMPERATURE
        self.system_prompt = system_prompt
        self.tools = get_tool_schemas()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def build_messages(self, conversation_id: str, message: str) -> List[Dict[str, Any]]:
        """System prompt + recency window of stored history + the new user turn."""
        history = self.store.recent(conversation_id, self.context_window)
        return [
            {"role": "system", "content": self.system_prompt},
            *(turn.to_message() for turn in history),
            {"role": "user", "content": message},
        ]

    async def _run_tools(self, calls: List[ToolInvocation]) -> List[str]:
        if self.parallel_tools and len(calls) > 1:
            return list(await asyncio.gather(*(execute_tool(call) for call in calls)))
        return [await execute_tool(call) for call in calls]

    async def _complete(self, messages: List[Dict[str, Any]], tool_choice: str = "auto") -> ModelReply:
        return await self.backend.complete(
            messages, tools=self.tools, temperature=self.temperature, tool_choice=tool_choice
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    async def answer(self, conversation_id: str, message: str) -> str:
        """Answer *message* in the context of *conversation_id* and record the exchange."""
        messages = self.build_messages(conversation_id, message)
        reply = await self._complete(messages)

        rounds = 0
        while reply.tool_calls:
            if rounds >= self.max_rounds:
                logger.warning(
                    "Conversation '%s' hit the tool round limit (%d); forcing a final answer",
                    conversation_id,
                    self.max_rounds,
                )
                reply = await self._complete(messages, tool_choice="none")
                if reply.tool_calls or not reply.content:
                    reply = ModelReply(content=ROUND_LIMIT_ANSWER)
                break

            rounds += 1
            logger.info(
                "Round %d: model requested %d tool calls: %s",
                rounds,
                len(reply.tool_calls),
                [call.name for call in reply.tool_calls],
            )
            messages.append(reply.to_message())
            results = await self._run_tools(reply.tool_calls)
            for call, result in zip(reply.tool_calls, results):
                messages.append({"role": "tool", "tool_call_id": call.id, "content": result})
            reply = await self._complete(messages)

        answer = reply.content if reply.content and reply.content.strip() else EMPTY_ANSWER
        self.store.append(
            conversation_id,
            [Turn(role=Role.USER, content=message), Turn(role=Role.ASSISTANT, content=answer)],
        )
        return answer
