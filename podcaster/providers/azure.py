"""Azure OpenAI deployment backend using the openai SDK's Azure client."""

from openai import AsyncAzureOpenAI

from podcaster.errors import ConfigurationError
from podcaster.models import ProviderConfig, ProviderKind
from podcaster.providers.openai_provider import ChatCompletionBackend

_DEFAULT_API_VERSION = "2024-02-01"


class AzureOpenAIBackend(ChatCompletionBackend):
    """Azure-style deployment; the deployment name is sent as the model."""

    kind = ProviderKind.AZURE

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        if not config.api_key or not config.endpoint:
            raise ConfigurationError(
                f"Azure OpenAI API key and endpoint are required for provider '{config.name}'"
            )
        self._client = AsyncAzureOpenAI(
            api_key=config.api_key,
            azure_endpoint=config.endpoint,
            api_version=config.api_version or _DEFAULT_API_VERSION,
        )

    def model_string(self) -> str:
        return self._config.deployment or self._config.model or "gpt-35-turbo"
