"""Exception hierarchy for session orchestration."""


class PodcastError(Exception):
    """Base class for all podcaster errors."""


class NotFoundError(PodcastError):
    """Raised when a referenced session, provider or template does not exist."""


class InvalidStateError(PodcastError):
    """Raised when an operation is not allowed in the current state."""


class UnsupportedProviderError(InvalidStateError):
    """Raised when no backend is registered for a provider kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Provider kind {kind!r} is not supported")


class ConfigurationError(PodcastError):
    """Raised when a provider or settings file is missing required values."""


class TemplateRenderError(PodcastError):
    """Raised when a prompt template cannot be rendered or is invalid."""
