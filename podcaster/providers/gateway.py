"""Language model gateway: kind → backend dispatch with graceful fallback."""

import logging

from podcaster.errors import ConfigurationError, UnsupportedProviderError
from podcaster.models import GenerationSettings, ProviderConfig, ProviderKind
from podcaster.providers.azure import AzureOpenAIBackend
from podcaster.providers.base import ModelBackend
from podcaster.providers.lmstudio import LMStudioBackend
from podcaster.providers.ollama import OllamaBackend
from podcaster.providers.openai_provider import OpenAIBackend

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = "I apologize, but I'm having trouble generating a response right now."

BACKENDS: dict[ProviderKind, type[ModelBackend]] = {
    ProviderKind.OPENAI: OpenAIBackend,
    ProviderKind.AZURE: AzureOpenAIBackend,
    ProviderKind.LMSTUDIO: LMStudioBackend,
    ProviderKind.OLLAMA: OllamaBackend,
}


class ModelGateway:
    """Executes prompts against configured providers.

    Backend failures never reach the caller: they are logged and replaced by
    FALLBACK_RESPONSE so one bad call costs one turn, not the whole session.
    Unsupported kinds and configuration errors are raised before any network
    call.
    """

    def __init__(self, backends: dict[ProviderKind, type[ModelBackend]] | None = None) -> None:
        self._backends = dict(BACKENDS if backends is None else backends)
        self._instances: dict[str, ModelBackend] = {}

    def backend_for(self, provider: ProviderConfig) -> ModelBackend:
        """Return the cached backend for a provider, building it on first use.

        Raises:
            UnsupportedProviderError: No backend is registered for the kind.
            ConfigurationError: Required credential or endpoint is missing.
        """
        backend = self._instances.get(provider.id)
        if backend is not None:
            return backend
        backend_cls = self._backends.get(provider.kind)
        if backend_cls is None:
            raise UnsupportedProviderError(getattr(provider.kind, "value", str(provider.kind)))
        backend = backend_cls(provider)
        self._instances[provider.id] = backend
        return backend

    async def generate(
        self,
        provider: ProviderConfig,
        prompt: str,
        persona: str,
        settings: GenerationSettings | None = None,
    ) -> str:
        backend = self.backend_for(provider)
        try:
            return await backend.complete(prompt, persona, settings)
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.error(
                "Error generating response from %s provider %s: %s",
                provider.kind.value,
                provider.name,
                exc,
            )
            return FALLBACK_RESPONSE
