"""
Tool registry for finchat.

This module declares the closed set of tools the language model may call and provides a decorator
to attach a data fetcher to each of them.  Every entry carries a unique name, a natural-language
description (the model reads it to decide relevance) and a pydantic model describing the
arguments.  The registry is populated when the fetcher modules are imported and is read-only
afterwards.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Type,
)

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    """Names of the tools exposed to the model."""

    SEARCH_WEB = "search_web"
    GOLD_RATE = "get_gold_rate"
    STOCK_PRICE = "get_stock_price"
    CRYPTO_PRICE = "get_crypto_price"
    MUTUAL_FUND_NAV = "get_mutual_fund_nav"


Fetcher = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    """Static declaration of one callable tool."""

    name: ToolName
    description: str
    args_model: Type[BaseModel]
    fetcher: Fetcher
    source: str = ""

    def parameters(self) -> Dict[str, Any]:
        """JSON schema of the tool arguments."""
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return schema


TOOL_REGISTRY: Dict[ToolName, ToolSpec] = {}
"""Global registry of tool specs keyed by tool name."""


def register_tool(
    name: ToolName, description: str, args_model: Type[BaseModel], source: str = ""
) -> Callable:
    """
    Register a fetcher coroutine as the implementation of tool *name*.

    Used as a decorator:
        @register_tool(ToolName.STOCK_PRICE, "Get a stock quote", StockPriceArgs, "Yahoo Finance")
        async def fetch_stock_price(symbol: str) -> StockQuote | Unavailable:
            ...

    The fetcher is called with the validated fields of *args_model* as keyword arguments.
    *source* names the upstream data provider for health reporting.

    Raises
    ------
    ValueError
        If a fetcher for the same name is already registered.
    """
    if name in TOOL_REGISTRY:
        raise ValueError(f"Tool '{name.value}' is already registered.")
    logger.debug("Registering tool '%s'", name.value)

    def wrapper(fn: Fetcher) -> Fetcher:
        TOOL_REGISTRY[name] = ToolSpec(
            name=name, description=description, args_model=args_model, fetcher=fn, source=source
        )
        return fn

    return wrapper


def get_tool_schemas() -> List[Dict[str, Any]]:
    """Return the registered tools as OpenAI function-tool definitions."""
    return [
        {
            "type": "function",
            "function": {
                "name": spec.name.value,
                "description": spec.description,
                "parameters": spec.parameters(),
            },
        }
        for spec in TOOL_REGISTRY.values()
    ]


def load_tools() -> Dict[ToolName, ToolSpec]:
    """Import every fetcher module so the registry is complete, then return it."""
    # pylint: disable=import-outside-toplevel,unused-import
    from finchat.tools import (  # noqa: F401
        crypto,
        equity,
        gold,
        mutual_fund,
        web_search,
    )

    missing = set(ToolName) - set(TOOL_REGISTRY)
    if missing:
        raise RuntimeError(f"Tools without a fetcher: {sorted(m.value for m in missing)}")
    return TOOL_REGISTRY
