"""
Core API backend for finchat.

This module exposes the assistant over HTTP for the browser frontend:
- **POST /api/chat**   - one exchange: {"message": "...", "conversationId": "..."}
- **POST /api/clear**  - forget a conversation: {"conversationId": "..."}
- **GET /api/health**  - credential and data-source status.

If ``FRONTEND_DIR`` points to an existing directory it is served as static files at ``/``.
"""

import logging
from pathlib import Path

from fastapi import (
    Depends,
    FastAPI,
    Request,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from finchat.agent.orchestrator import Orchestrator
from finchat.agent.planner_interface import load_backend
from finchat.agent.tool_executor import TOOLS
from finchat.config import settings
from finchat.core.errors import (
    ConfigurationError,
    FinchatError,
    InvalidRequestError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitError,
)
from finchat.api.models import (
    ChatRequest,
    ChatResponse,
    ClearRequest,
    ClearResponse,
    ErrorResponse,
    HealthResponse,
)
from finchat.memory.conversation_store import ConversationStore

logger = logging.getLogger(__name__)

KEY_INSTRUCTIONS = {
    "openai": "Get a free key at https://console.groq.com/keys and set GROQ_API_KEY "
    "(or OPENAI_API_KEY) in your .env file.",
    "anthropic": "Create a key at https://console.anthropic.com/ and set ANTHROPIC_API_KEY "
    "in your .env file.",
}

app = FastAPI(title="finchat API", version="0.1.0", description="Indian personal-finance assistant")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.store = ConversationStore()
app.state.orchestrator = Orchestrator(load_backend(), app.state.store)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def get_orchestrator(request: Request) -> Orchestrator:
    """Orchestrator bound to the app (overridable in tests)."""
    return request.app.state.orchestrator


def _key_instructions() -> str:
    return KEY_INSTRUCTIONS.get(settings.BACKEND.lower(), KEY_INSTRUCTIONS["openai"])


def _error(status_code: int, payload: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
@app.exception_handler(FinchatError)
async def finchat_error_handler(request: Request, exc: FinchatError) -> JSONResponse:
    """Map the error taxonomy onto HTTP status codes with remediation text."""
    instructions = _key_instructions()

    if isinstance(exc, InvalidRequestError):
        return _error(400, ErrorResponse(error=str(exc)))
    if isinstance(exc, ConfigurationError):
        return _error(
            503,
            ErrorResponse(
                error="API key not configured. Please add it to your .env file",
                instructions=instructions,
                details=str(exc),
            ),
        )
    if isinstance(exc, UpstreamAuthError):
        return _error(
            401,
            ErrorResponse(
                error="Invalid API key. Please check the key in your .env file",
                instructions=instructions,
            ),
        )
    if isinstance(exc, UpstreamRateLimitError):
        return _error(
            429,
            ErrorResponse(
                error="Rate limit reached. Please wait a moment and try again.",
                details="Free tier has usage limits.",
            ),
        )
    return _error(
        500,
        ErrorResponse(error="Failed to process message. Please try again.", details=str(exc)),
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/api/health", response_model=HealthResponse, summary="Health check")
async def health(orchestrator: Orchestrator = Depends(get_orchestrator)) -> HealthResponse:
    """Report whether the model credential is configured and which data sources are active."""
    return HealthResponse(
        backend=orchestrator.backend.name,
        model=orchestrator.backend.model,
        api_key_configured=bool(settings.active_api_key()),
        data_sources=[f"{spec.name.value}: {spec.source}" for spec in TOOLS.values()],
    )


@app.post("/api/chat", response_model=ChatResponse, summary="Process a message")
async def chat(
    req: ChatRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> ChatResponse:
    """Answer a user message in the context of its conversation."""
    if not req.message or not req.message.strip():
        raise InvalidRequestError("Message is required")

    logger.info("Chat request for conversation '%s'", req.conversation_id)
    try:
        # Serialize exchanges on the same conversation so history updates are not lost
        async with orchestrator.store.lock(req.conversation_id):
            answer = await orchestrator.answer(req.conversation_id, req.message)
    except FinchatError:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Chat processing failed")
        raise UpstreamError(str(exc)) from exc

    return ChatResponse(response=answer, conversation_id=req.conversation_id)


@app.post("/api/clear", response_model=ClearResponse, summary="Clear a conversation")
async def clear(
    req: ClearRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> ClearResponse:
    """Forget a conversation's history.  Always acknowledges."""
    orchestrator.store.delete(req.conversation_id)
    logger.info("Cleared conversation '%s'", req.conversation_id)
    return ClearResponse()


if settings.FRONTEND_DIR and Path(settings.FRONTEND_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.FRONTEND_DIR, html=True), name="frontend")


# ---------------------------------------------------------------------------
# Public helper to launch the API (imported by main.py)
# ---------------------------------------------------------------------------
def run_api(
    host: str = "0.0.0.0", port: int = 3000, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload (useful in development).
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # uvicorn is only needed when serving
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:  # Use the default from settings if not provided
        log_level = settings.LOG_LEVEL

    if settings.active_api_key():
        logger.info("API key configured for backend '%s'", settings.BACKEND)
    else:
        logger.warning(
            "No API key configured for backend '%s'; chat requests will fail", settings.BACKEND
        )

    logger.info(
        "Starting finchat API at %s:%d (reload=%s, log_level=%s)", host, port, reload, log_level
    )
    uvicorn.run(
        "finchat.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# `python -m finchat.api.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_api(reload=True)
