"""Tests for the chat-completion backends, using fake SDK clients."""

import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from finchat.agent.planner_interface import (
    AnthropicChatBackend,
    OpenAIChatBackend,
    load_backend,
    to_anthropic_messages,
    to_anthropic_tools,
)
from finchat.core.errors import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamRateLimitError,
)


class _FakeCompletions:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


def _openai_backend(completions: _FakeCompletions) -> OpenAIChatBackend:
    backend = OpenAIChatBackend(api_key="test-key", model="test-model")
    backend._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return backend


def _openai_error(cls, status: int):
    request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
    return cls("upstream said no", response=httpx.Response(status, request=request), body=None)


def test_load_backend_by_name() -> None:
    assert isinstance(load_backend("openai"), OpenAIChatBackend)
    assert isinstance(load_backend("Anthropic"), AnthropicChatBackend)


def test_load_unknown_backend() -> None:
    with pytest.raises(ConfigurationError):
        load_backend("nope")


@pytest.mark.asyncio
async def test_missing_key_is_configuration_error() -> None:
    backend = OpenAIChatBackend(api_key="")

    with pytest.raises(ConfigurationError):
        await backend.complete([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_openai_tool_calls_are_normalized() -> None:
    message = SimpleNamespace(
        content=None,
        tool_calls=[
            SimpleNamespace(
                id="call_1",
                function=SimpleNamespace(name="get_stock_price", arguments='{"symbol": "TCS"}'),
            )
        ],
    )
    completions = _FakeCompletions(result=SimpleNamespace(choices=[SimpleNamespace(message=message)]))
    tools = [{"type": "function", "function": {"name": "get_stock_price", "parameters": {}}}]

    reply = await _openai_backend(completions).complete(
        [{"role": "user", "content": "tcs?"}], tools=tools, temperature=0.3
    )

    assert reply.content is None
    assert reply.tool_calls[0].id == "call_1"
    assert json.loads(reply.tool_calls[0].arguments) == {"symbol": "TCS"}
    assert completions.kwargs["tool_choice"] == "auto"
    assert completions.kwargs["temperature"] == 0.3
    assert completions.kwargs["model"] == "test-model"


@pytest.mark.asyncio
async def test_openai_text_reply_without_tools() -> None:
    message = SimpleNamespace(content="ELSS has a 3 year lock-in.", tool_calls=None)
    completions = _FakeCompletions(result=SimpleNamespace(choices=[SimpleNamespace(message=message)]))

    reply = await _openai_backend(completions).complete([{"role": "user", "content": "elss?"}])

    assert reply.content == "ELSS has a 3 year lock-in."
    assert reply.tool_calls == []
    assert "tools" not in completions.kwargs


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "sdk_error, expected",
    [
        (_openai_error(openai.AuthenticationError, 401), UpstreamAuthError),
        (_openai_error(openai.RateLimitError, 429), UpstreamRateLimitError),
    ],
)
async def test_openai_errors_are_mapped(sdk_error, expected) -> None:
    backend = _openai_backend(_FakeCompletions(error=sdk_error))

    with pytest.raises(expected):
        await backend.complete([{"role": "user", "content": "hi"}])


def test_anthropic_message_translation() -> None:
    messages = [
        {"role": "system", "content": "persona"},
        {"role": "user", "content": "btc and eth?"},
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {"id": "t1", "type": "function", "function": {"name": "get_crypto_price", "arguments": '{"crypto_id": "btc"}'}},
                {"id": "t2", "type": "function", "function": {"name": "get_crypto_price", "arguments": '{"crypto_id": "eth"}'}},
            ],
        },
        {"role": "tool", "tool_call_id": "t1", "content": "btc data"},
        {"role": "tool", "tool_call_id": "t2", "content": "eth data"},
    ]

    system, converted = to_anthropic_messages(messages)

    assert system == "persona"
    assert converted[0] == {"role": "user", "content": "btc and eth?"}
    assert converted[1]["role"] == "assistant"
    assert converted[1]["content"][0] == {
        "type": "tool_use",
        "id": "t1",
        "name": "get_crypto_price",
        "input": {"crypto_id": "btc"},
    }
    assert len(converted) == 3
    assert converted[2]["role"] == "user"
    assert [block["tool_use_id"] for block in converted[2]["content"]] == ["t1", "t2"]


def test_anthropic_tool_translation() -> None:
    tools = [
        {
            "type": "function",
            "function": {
                "name": "search_web",
                "description": "Search",
                "parameters": {"type": "object", "properties": {"query": {"type": "string"}}},
            },
        }
    ]

    assert to_anthropic_tools(tools) == [
        {
            "name": "search_web",
            "description": "Search",
            "input_schema": {"type": "object", "properties": {"query": {"type": "string"}}},
        }
    ]


@pytest.mark.asyncio
async def test_anthropic_reply_is_normalized() -> None:
    response = SimpleNamespace(
        content=[
            SimpleNamespace(type="text", text="Let me check."),
            SimpleNamespace(type="tool_use", id="tu_1", name="get_gold_rate", input={"city": "Jaipur"}),
        ]
    )
    messages_api = _FakeCompletions(result=response)
    backend = AnthropicChatBackend(api_key="test-key", model="claude-test")
    backend._client = SimpleNamespace(messages=messages_api)

    reply = await backend.complete(
        [{"role": "system", "content": "persona"}, {"role": "user", "content": "gold in Jaipur"}],
        tools=[{"type": "function", "function": {"name": "get_gold_rate", "parameters": {}}}],
    )

    assert reply.content == "Let me check."
    assert reply.tool_calls[0].name == "get_gold_rate"
    assert json.loads(reply.tool_calls[0].arguments) == {"city": "Jaipur"}
    assert messages_api.kwargs["system"] == "persona"
    assert messages_api.kwargs["tool_choice"] == {"type": "auto"}
