"""
Shared fixtures for the finchat test suite.

No test touches the network: fetchers get an ``httpx.MockTransport`` client and the model is
replaced by :class:`ScriptedBackend`, which plays back prepared replies.
"""

import dataclasses
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Sequence,
)

import httpx
import pytest

from finchat.agent.planner_interface import BaseChatBackend
from finchat.agent.tool_executor import TOOLS
from finchat.core.schema import (
    ModelReply,
    ToolInvocation,
)
from finchat.memory.conversation_store import ConversationStore
from finchat.tools import ToolName


class ScriptedBackend(BaseChatBackend):
    """Backend that returns (or raises) pre-recorded replies in order."""

    name = "scripted"

    def __init__(self, replies: Sequence[ModelReply | Exception]):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    @property
    def model(self) -> str:
        return "scripted-model"

    async def complete(self, messages, tools=None, temperature=0.3, tool_choice="auto"):
        self.calls.append(
            {
                "messages": [dict(m) for m in messages],
                "tools": tools,
                "temperature": temperature,
                "tool_choice": tool_choice,
            }
        )
        if not self.replies:
            raise AssertionError("ScriptedBackend ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def text_reply(text: str) -> ModelReply:
    return ModelReply(content=text)


def tool_reply(*calls: tuple) -> ModelReply:
    """Build a reply requesting ``(id, name, arguments_json)`` tool calls."""
    return ModelReply(
        content=None,
        tool_calls=[ToolInvocation(id=cid, name=name, arguments=args) for cid, name, args in calls],
    )


@pytest.fixture
def store() -> ConversationStore:
    return ConversationStore(max_turns=10)


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for an ``AsyncClient`` whose requests are answered by *handler*."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def patch_fetcher(monkeypatch) -> Callable[[ToolName, Callable], None]:
    """Swap the fetcher behind a registered tool for the duration of a test."""

    def patch(name: ToolName, fetcher: Callable) -> None:
        monkeypatch.setitem(TOOLS, name, dataclasses.replace(TOOLS[name], fetcher=fetcher))

    return patch
