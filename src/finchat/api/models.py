"""
Pydantic models for finchat API requests and responses.
This module defines the request and response schemas used by the finchat API.  Field names
follow the camelCase shape the browser frontend already sends.
"""

from typing import (
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

DEFAULT_CONVERSATION_ID = "default"


def _conversation_id_or_default(value):
    # Browsers send null or "" when no conversation was started yet
    return value or DEFAULT_CONVERSATION_ID


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class ChatRequest(BaseModel):
    """Incoming user message.  ``message`` is checked by the route to answer with a 400."""

    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = Field(None, description="User message for the assistant")
    conversation_id: str = Field(
        DEFAULT_CONVERSATION_ID,
        alias="conversationId",
        description="Conversation ID for history context",
    )

    @field_validator("conversation_id", mode="before")
    @classmethod
    def _default_id(cls, value):
        return _conversation_id_or_default(value)


class ChatResponse(BaseModel):
    """Assistant reply returned to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    conversation_id: str = Field(..., alias="conversationId")


class ClearRequest(BaseModel):
    """Request to forget a conversation."""

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field(DEFAULT_CONVERSATION_ID, alias="conversationId")

    @field_validator("conversation_id", mode="before")
    @classmethod
    def _default_id(cls, value):
        return _conversation_id_or_default(value)


class ClearResponse(BaseModel):
    """Fixed acknowledgement for a clear request."""

    message: str = "Conversation cleared"


class HealthResponse(BaseModel):
    """Service status."""

    status: str = "ok"
    backend: str
    model: str
    api_key_configured: bool
    data_sources: List[str]


class ErrorResponse(BaseModel):
    """Error payload with optional remediation."""

    error: str
    instructions: Optional[str] = None
    details: Optional[str] = None
