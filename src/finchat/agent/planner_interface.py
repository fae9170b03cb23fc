"""
Chat-completion backends for finchat.

This module is the only place that *directly* calls an LLM.  Everything else (orchestrator, tools,
memory) stays model-agnostic and speaks OpenAI-style message dicts:

    {"role": "system" | "user" | "assistant" | "tool", "content": ..., "tool_calls": [...],
     "tool_call_id": ...}

We support two back-ends out of the box:

1. **OpenAI-compatible** chat completions (OpenAI, Groq, OpenRouter, local servers...).
2. **Anthropic** messages API, translated to and from the OpenAI shape.

Additional providers can be added by subclassing :class:`BaseChatBackend` and registering via
:func:`register_backend`.
"""

import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Sequence,
    Type,
)

from finchat.config import settings
from finchat.core.errors import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitError,
    UpstreamTransientError,
)
from finchat.core.schema import (
    ModelReply,
    ToolInvocation,
)

logger = logging.getLogger(__name__)

Message = Dict[str, Any]


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_BACKEND_REGISTRY: dict[str, Type["BaseChatBackend"]] = {}


def register_backend(name: str) -> Callable:
    """Decorator to register a backend class under *name*."""

    def wrapper(cls: Type["BaseChatBackend"]) -> Type["BaseChatBackend"]:
        _BACKEND_REGISTRY[name] = cls
        return cls

    return wrapper


def load_backend(name: str | None = None) -> "BaseChatBackend":
    """
    Factory that returns an instantiated backend.

    Fallback order:
    1. *name* arg
    2. ``settings.BACKEND`` env option
    3. default: ``"openai"``
    """

    target = name or getattr(settings, "BACKEND", "openai")
    cls = _BACKEND_REGISTRY.get(target.lower())
    if cls is None:
        raise ConfigurationError(f"Backend '{target}' is not registered.")
    return cls()


def _map_sdk_error(sdk: Any, exc: Exception) -> UpstreamError:
    """Translate an OpenAI/Anthropic SDK exception into our taxonomy.

    Both SDKs expose the same exception class names, so one mapping serves both.
    """
    if isinstance(exc, (sdk.AuthenticationError, sdk.PermissionDeniedError)):
        return UpstreamAuthError(str(exc))
    if isinstance(exc, sdk.RateLimitError):
        return UpstreamRateLimitError(str(exc))
    if isinstance(exc, sdk.APIConnectionError):
        return UpstreamTransientError(str(exc))
    return UpstreamError(str(exc))


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BaseChatBackend(ABC):
    """Abstract backend that turns a message list into a :class:`ModelReply`."""

    name: str = "base"

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier sent upstream."""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[Dict[str, Any]] | None = None,
        temperature: float = 0.3,
        tool_choice: str = "auto",
    ) -> ModelReply:
        """Return the model's final text or the tool invocations it requests."""


# ---------------------------------------------------------------------------
# Concrete backends
# ---------------------------------------------------------------------------
@register_backend("openai")
class OpenAIChatBackend(BaseChatBackend):
    """OpenAI-compatible chat completions with native tool calling."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self._base_url = base_url or settings.OPENAI_BASE_URL
        self._model = model or settings.OPENAI_MODEL
        self._client: Any = None

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        if not self._api_key:
            raise ConfigurationError("OPENAI_API_KEY (or GROQ_API_KEY) is not set")
        if self._client is None:
            import openai  # pylint: disable=import-outside-toplevel

            self._client = openai.AsyncOpenAI(
                api_key=self._api_key, base_url=self._base_url, timeout=settings.LLM_TIMEOUT
            )
        return self._client

    async def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[Dict[str, Any]] | None = None,
        temperature: float = 0.3,
        tool_choice: str = "auto",
    ) -> ModelReply:
        import openai  # pylint: disable=import-outside-toplevel

        client = self._get_client()
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": list(messages),
            "temperature": temperature,
        }
        if tools:
            kwargs["tools"] = list(tools)
            kwargs["tool_choice"] = tool_choice

        try:
            resp = await client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            logger.error("OpenAI backend error: %s", exc)
            raise _map_sdk_error(openai, exc) from exc

        if not resp.choices:
            raise UpstreamTransientError("Empty response from chat-completion API")
        message = resp.choices[0].message
        calls = [
            ToolInvocation(
                id=call.id, name=call.function.name, arguments=call.function.arguments or "{}"
            )
            for call in (message.tool_calls or [])
        ]
        logger.debug("OpenAI reply: content=%r tool_calls=%s", message.content, calls)
        return ModelReply(content=message.content, tool_calls=calls)


def to_anthropic_tools(tools: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert OpenAI function-tool definitions to Anthropic tool definitions."""
    return [
        {
            "name": tool["function"]["name"],
            "description": tool["function"].get("description", ""),
            "input_schema": tool["function"].get("parameters", {"type": "object"}),
        }
        for tool in tools
    ]


def to_anthropic_messages(messages: Sequence[Message]) -> tuple[str, List[Dict[str, Any]]]:
    """Split OpenAI-style messages into an Anthropic system prompt and message list.

    Consecutive ``tool`` messages are folded into one user message of ``tool_result`` blocks.
    """
    system_parts: List[str] = []
    converted: List[Dict[str, Any]] = []

    for msg in messages:
        role = msg["role"]
        if role == "system":
            system_parts.append(msg.get("content") or "")
        elif role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": msg["tool_call_id"],
                "content": msg.get("content") or "",
            }
            last = converted[-1] if converted else None
            if last and last["role"] == "user" and isinstance(last["content"], list):
                last["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
        elif role == "assistant" and msg.get("tool_calls"):
            blocks: List[Dict[str, Any]] = []
            if msg.get("content"):
                blocks.append({"type": "text", "text": msg["content"]})
            for call in msg["tool_calls"]:
                fn = call["function"]
                try:
                    arguments = json.loads(fn.get("arguments") or "{}")
                except json.JSONDecodeError:
                    arguments = {}
                blocks.append(
                    {"type": "tool_use", "id": call["id"], "name": fn["name"], "input": arguments}
                )
            converted.append({"role": "assistant", "content": blocks})
        else:
            converted.append({"role": role, "content": msg.get("content") or ""})

    return "\n\n".join(system_parts), converted


@register_backend("anthropic")
class AnthropicChatBackend(BaseChatBackend):
    """Anthropic Claude backend with tool use."""

    name = "anthropic"
    max_tokens = 2048

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self._api_key = api_key if api_key is not None else settings.ANTHROPIC_API_KEY
        self._model = model or settings.ANTHROPIC_MODEL
        self._client: Any = None

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> Any:
        if not self._api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not set")
        if self._client is None:
            import anthropic  # pylint: disable=import-outside-toplevel

            self._client = anthropic.AsyncAnthropic(
                api_key=self._api_key, timeout=settings.LLM_TIMEOUT
            )
        return self._client

    async def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[Dict[str, Any]] | None = None,
        temperature: float = 0.3,
        tool_choice: str = "auto",
    ) -> ModelReply:
        import anthropic  # pylint: disable=import-outside-toplevel

        client = self._get_client()
        system_prompt, converted = to_anthropic_messages(messages)
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "max_tokens": self.max_tokens,
            "system": system_prompt,
            "messages": converted,
            "temperature": temperature,
        }
        if tools:
            kwargs["tools"] = to_anthropic_tools(tools)
            kwargs["tool_choice"] = {"type": tool_choice}

        try:
            response = await client.messages.create(**kwargs)
        except anthropic.AnthropicError as exc:
            logger.error("Anthropic backend error: %s", exc)
            raise _map_sdk_error(anthropic, exc) from exc

        texts: List[str] = []
        calls: List[ToolInvocation] = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                calls.append(
                    ToolInvocation(id=block.id, name=block.name, arguments=json.dumps(block.input))
                )
        logger.debug("Anthropic reply: %d text blocks, tool_calls=%s", len(texts), calls)
        return ModelReply(content="".join(texts) or None, tool_calls=calls)
