"""Exception hierarchy shared by the orchestrator, the backends and the HTTP layer."""


class FinchatError(RuntimeError):
    """Base class for all application errors."""


class ConfigurationError(FinchatError):
    """Raised when a required credential or setting is missing.  Never retried."""


class InvalidRequestError(FinchatError):
    """Raised when an inbound request lacks a required field."""


class UpstreamError(FinchatError):
    """Raised when the chat-completion service fails."""


class UpstreamAuthError(UpstreamError):
    """The chat-completion service rejected our credential."""


class UpstreamRateLimitError(UpstreamError):
    """The chat-completion service signalled a rate limit."""


class UpstreamTransientError(UpstreamError):
    """Network or parse failure talking to an upstream service."""


class UnknownToolError(FinchatError):
    """Raised when the model requests a tool that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' is not registered.")
        self.name = name
