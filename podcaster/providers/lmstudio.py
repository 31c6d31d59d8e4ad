"""Local chat-completion server (LM Studio) via the OpenAI-compatible API."""

from openai import AsyncOpenAI

from podcaster.errors import ConfigurationError
from podcaster.models import ProviderConfig, ProviderKind
from podcaster.providers.openai_provider import ChatCompletionBackend

# Local servers accept any key but the SDK insists on one
_PLACEHOLDER_KEY = "lm-studio"


class LMStudioBackend(ChatCompletionBackend):
    """LM Studio server at ``{endpoint}/v1/chat/completions``."""

    kind = ProviderKind.LMSTUDIO
    default_max_tokens = 150

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        if not config.endpoint:
            raise ConfigurationError(f"LM Studio endpoint is required for provider '{config.name}'")
        self._client = AsyncOpenAI(
            api_key=config.api_key or _PLACEHOLDER_KEY,
            base_url=f"{config.endpoint.rstrip('/')}/v1",
        )

    def model_string(self) -> str:
        return self._config.model or "local-model"
