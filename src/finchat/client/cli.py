"""Terminal client for the finchat API."""

from __future__ import annotations

import logging
import time
import uuid
from typing import (
    Any,
    Dict,
    Tuple,
    cast,
)

import httpx

from finchat.config import settings

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit"}
CLEAR_COMMAND = "clear"


# ---------------------------------------------------------------------------
# CLI Client
# ---------------------------------------------------------------------------
def get_user_message() -> Tuple[str, bool]:
    """
    Get a message from the user via standard input.

    Returns:
        Tuple of (user_input, success_flag)
        The success_flag is False if input couldn't be read (e.g., Ctrl+C)
    """
    try:
        return input("\nYou: ").strip(), True
    except (EOFError, KeyboardInterrupt):
        return "", False


def call_api(
    endpoint: str,
    data: Dict[str, Any],
    max_retries: int = 5,
    client: httpx.Client | None = None,
) -> Dict[str, Any]:
    """POST *data* to the API and return the JSON body, retrying while the server starts."""
    api_url = f"http://localhost:{settings.API_PORT}{endpoint}"
    http = client or httpx.Client(timeout=settings.LLM_TIMEOUT + 30)

    try:
        for attempt in range(max_retries):
            try:
                response = http.post(api_url, json=data)
            except httpx.ConnectError:
                if attempt == max_retries - 1:
                    break
                retry_delay = 0.5 * (2**attempt)  # exponential backoff: 0.5s, 1s, 2s, 4s...
                logger.info(
                    "API not ready yet, retrying in %.1f seconds (attempt %d/%d)...",
                    retry_delay,
                    attempt + 1,
                    max_retries,
                )
                time.sleep(retry_delay)
                continue
            except httpx.HTTPError as exc:
                logger.error("API request error: %s", exc)
                return {"response": f"Error connecting to API: {exc}"}

            try:
                body = cast(Dict[str, Any], response.json())
            except ValueError:
                body = {}
            if response.is_error:
                # Error payloads carry "error" plus optional remediation
                hint = body.get("instructions") or body.get("details")
                message = f"API error: {body.get('error', response.status_code)}"
                return {"response": f"{message}\n{hint}" if hint else message}
            return body
    finally:
        if client is None:
            http.close()

    return {"response": f"Failed to connect to API after {max_retries} attempts"}


def run_cli() -> None:
    """Run the terminal client that talks to the API."""
    conversation_id = f"cli-{uuid.uuid4().hex[:8]}"

    print("finchat - ask about taxes, mutual funds, insurance, schemes or live prices.")
    print("Type 'clear' to start over, 'exit' or 'quit' (or Ctrl+C) to leave.")
    while True:
        user_msg, ok = get_user_message()
        if not ok:
            break  # Exit if user input couldn't be retrieved (e.g., Ctrl+C)
        if not user_msg:
            continue
        if user_msg.lower() in EXIT_COMMANDS:
            break
        if user_msg.lower() == CLEAR_COMMAND:
            reply = call_api("/api/clear", {"conversationId": conversation_id})
            print(reply.get("message") or reply.get("response", ""))
            continue

        reply = call_api("/api/chat", {"message": user_msg, "conversationId": conversation_id})
        print(f"\nAssistant: {reply.get('response', 'No response from API')}")


if __name__ == "__main__":
    run_cli()
