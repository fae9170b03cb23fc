"""Tests for the static tool registry and the schemas handed to the model."""

import pytest
from pydantic import BaseModel

from finchat.agent.rendering import (
    REMEDIATION,
    RENDERERS,
)
from finchat.agent.tool_executor import TOOLS
from finchat.tools import (
    ToolName,
    get_tool_schemas,
    register_tool,
)


def test_every_tool_is_registered() -> None:
    assert set(TOOLS) == set(ToolName)
    assert set(RENDERERS) == set(ToolName)
    assert set(REMEDIATION) == set(ToolName)


def test_schemas_are_openai_function_tools() -> None:
    schemas = {tool["function"]["name"]: tool for tool in get_tool_schemas()}

    assert set(schemas) == {name.value for name in ToolName}
    for tool in schemas.values():
        assert tool["type"] == "function"
        assert tool["function"]["description"]
        assert tool["function"]["parameters"]["type"] == "object"


@pytest.mark.parametrize(
    "name, param, required",
    [
        ("search_web", "query", True),
        ("get_gold_rate", "city", False),
        ("get_stock_price", "symbol", True),
        ("get_crypto_price", "crypto_id", True),
        ("get_mutual_fund_nav", "scheme_code", True),
    ],
)
def test_parameter_schema(name: str, param: str, required: bool) -> None:
    tool = next(t for t in get_tool_schemas() if t["function"]["name"] == name)
    parameters = tool["function"]["parameters"]

    assert parameters["properties"][param]["type"] == "string"
    assert parameters["properties"][param]["description"]
    assert (param in parameters.get("required", [])) is required


def test_duplicate_registration_rejected() -> None:
    class Args(BaseModel):
        query: str

    try:
        register_tool(ToolName.SEARCH_WEB, "dup", Args)
    except ValueError as exc:
        assert "search_web" in str(exc)
    else:  # pragma: no cover
        raise AssertionError("ValueError was not raised")


def test_data_sources_are_named() -> None:
    assert TOOLS[ToolName.CRYPTO_PRICE].source == "CoinGecko"
    assert all(spec.source for spec in TOOLS.values())
