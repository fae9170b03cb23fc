"""Dispatches model tool invocations to the registered fetchers and renders their outcome."""

import json
import logging
from typing import (
    Any,
    Dict,
)

from pydantic import ValidationError

from finchat.agent.rendering import (
    REMEDIATION,
    render,
)
from finchat.core.errors import UnknownToolError
from finchat.core.schema import ToolInvocation
from finchat.tools import (
    ToolName,
    ToolSpec,
    load_tools,
)

logger = logging.getLogger(__name__)

UNKNOWN_FUNCTION = "Unknown function: {name}"
INVALID_ARGUMENTS = "Invalid arguments for {name}: {error}"

TOOLS = load_tools()


class ToolExecutionError(RuntimeError):
    """Raised when a registered fetcher breaks its contract by raising."""


def _lookup(name: str) -> ToolSpec:
    try:
        return TOOLS[ToolName(name)]
    except (ValueError, KeyError) as exc:
        raise UnknownToolError(name) from exc


def parse_arguments(raw: str | Dict[str, Any] | None) -> Dict[str, Any]:
    """Decode the JSON argument payload of an invocation."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    parsed = json.loads(raw)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


async def _run(spec: ToolSpec, kwargs: Dict[str, Any]) -> Any:
    try:
        logger.debug("Executing tool '%s' with args=%s", spec.name.value, kwargs)
        return await spec.fetcher(**kwargs)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", spec.name.value)
        raise ToolExecutionError(f"Tool '{spec.name.value}' raised an error: {exc}") from exc


async def execute_tool(invocation: ToolInvocation) -> str:
    """
    Run the fetcher behind *invocation* and return its rendered text.

    Never raises: unknown tools, malformed arguments and fetcher failures all become text the
    model can read.
    """
    try:
        spec = _lookup(invocation.name)
    except UnknownToolError:
        logger.warning("Model requested unknown tool '%s'", invocation.name)
        return UNKNOWN_FUNCTION.format(name=invocation.name)

    try:
        args = spec.args_model.model_validate(parse_arguments(invocation.arguments))
    except (ValueError, ValidationError) as exc:
        logger.warning("Bad arguments for tool '%s': %s", spec.name.value, exc)
        return INVALID_ARGUMENTS.format(name=spec.name.value, error=exc)

    try:
        outcome = await _run(spec, args.model_dump())
    except ToolExecutionError:
        return REMEDIATION[spec.name]

    text = render(spec.name, outcome)
    logger.info("Tool '%s' returned %d chars", spec.name.value, len(text))
    return text
