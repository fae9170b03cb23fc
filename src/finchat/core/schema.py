"""
Schema definitions for model <-> orchestrator <-> tool messages.

These data models serve as the contract between the chat-completion backend, the orchestration
loop, the conversation store and individual data fetchers.  We keep them separate from runtime
logic so they can be imported anywhere without side-effects.
"""

from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------
class Role(str, Enum):
    """Speaker of a stored turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Turn(BaseModel):
    """One message exchanged in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def to_message(self) -> Dict[str, str]:
        """Render as a chat-completion message."""
        return {"role": self.role.value, "content": self.content}


# ---------------------------------------------------------------------------
# Model replies
# ---------------------------------------------------------------------------
class ToolInvocation(BaseModel):
    """A call that the model wants the orchestrator to execute."""

    id: str = Field(..., description="Identifier used to correlate the tool result")
    name: str = Field(..., description="Requested tool name")
    arguments: str = Field("{}", description="JSON-encoded keyword arguments for the tool")

    def to_message_part(self) -> Dict[str, Any]:
        """Render in the OpenAI ``tool_calls`` wire shape."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


class ModelReply(BaseModel):
    """Normalized answer of any chat-completion backend."""

    content: Optional[str] = None
    tool_calls: List[ToolInvocation] = Field(default_factory=list)

    def to_message(self) -> Dict[str, Any]:
        """Render as the assistant message appended before tool results."""
        message: Dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [call.to_message_part() for call in self.tool_calls]
        return message


# ---------------------------------------------------------------------------
# Fetch outcomes
# ---------------------------------------------------------------------------
class UnavailableReason(str, Enum):
    """Why a fetcher could not produce data."""

    NO_DATA = "no_data"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse_error"


class Unavailable(BaseModel):
    """Sentinel returned by a fetcher instead of raising."""

    tool: str
    reason: UnavailableReason
    detail: str = ""


class SearchHit(BaseModel):
    """A single parsed web search result."""

    title: str
    snippet: str = ""
    link: str = ""


class GoldAdvisory(BaseModel):
    """Advisory text synthesized from trusted search snippets."""

    city: str
    text: str
    sources: List[str] = Field(default_factory=list)


class StockQuote(BaseModel):
    """Latest equity quote."""

    symbol: str
    price: float
    previous_close: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    currency: str = "INR"
    exchange: Optional[str] = None


class CryptoQuote(BaseModel):
    """Latest crypto price in INR and USD."""

    crypto_id: str
    price_inr: Optional[float] = None
    price_usd: Optional[float] = None
    change_24h: Optional[float] = None


class FundNav(BaseModel):
    """Most recent NAV data point of a mutual fund scheme."""

    scheme_code: str
    scheme_name: str = ""
    fund_house: str = ""
    category: str = ""
    nav: float
    date: str
