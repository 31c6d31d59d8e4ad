"""Abstract base for all language-model backends."""

from abc import ABC, abstractmethod

from podcaster.models import GenerationSettings, ProviderConfig, ProviderKind


class ProviderError(Exception):
    """Raised when a backend call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


# Returned in place of an empty completion
EMPTY_RESPONSE = "I'm not sure how to respond to that."


def system_message(persona: str) -> str:
    """Podcast system instruction shared by every backend."""
    return (
        f"You are participating in a podcast discussion. Your persona: {persona}. "
        "Respond naturally and conversationally, as if you're speaking in a podcast. "
        "Keep responses concise but engaging, typically 2-4 sentences. "
        "Don't start with labels like 'Me:' or 'I:'."
    )


class ModelBackend(ABC):
    """One provider kind's implementation of text generation.

    Subclasses validate their configuration in ``__init__`` and raise
    ConfigurationError before any network call when a required credential or
    endpoint is missing.
    """

    kind: ProviderKind

    # Used when the template carries no settings
    default_max_tokens = 500
    default_temperature = 0.7

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    def name(self) -> str:
        return self._config.name

    @abstractmethod
    def model_string(self) -> str:
        """Return the model or deployment identifier sent to the backend."""
        ...

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        persona: str,
        settings: GenerationSettings | None = None,
    ) -> str:
        """Generate a reply for the rendered prompt in the given persona.

        Raises:
            ProviderError: On API failure, timeout, or malformed response.
        """
        ...

    def _max_tokens(self, settings: GenerationSettings | None) -> int:
        return settings.max_tokens if settings else self.default_max_tokens

    def _temperature(self, settings: GenerationSettings | None) -> float:
        return settings.temperature if settings else self.default_temperature
