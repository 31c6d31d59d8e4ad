"""OpenAI-compatible chat backends using the openai SDK with native async."""

import asyncio
import logging
import time
from typing import Any

from openai import AsyncOpenAI

from podcaster.errors import ConfigurationError
from podcaster.models import GenerationSettings, ProviderConfig, ProviderKind
from podcaster.providers.base import EMPTY_RESPONSE, ModelBackend, ProviderError, system_message

logger = logging.getLogger(__name__)


class ChatCompletionBackend(ModelBackend):
    """Shared chat.completions call for every OpenAI-compatible server."""

    _client: Any

    def _request_options(self, settings: GenerationSettings | None) -> dict[str, Any]:
        options: dict[str, Any] = {
            "max_tokens": self._max_tokens(settings),
            "temperature": self._temperature(settings),
        }
        if settings is not None:
            if settings.top_p is not None:
                options["top_p"] = settings.top_p
            options["frequency_penalty"] = settings.frequency_penalty
            options["presence_penalty"] = settings.presence_penalty
            if settings.stop:
                options["stop"] = settings.stop
        return options

    async def complete(
        self,
        prompt: str,
        persona: str,
        settings: GenerationSettings | None = None,
    ) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.model_string(),
                    messages=[
                        {"role": "system", "content": system_message(persona)},
                        {"role": "user", "content": prompt},
                    ],
                    **self._request_options(settings),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if choice is None:
            raise ProviderError(self._config.name, "Response has no choices")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        logger.info(
            "%s %s: %.2fs, %s tokens",
            self.kind.value,
            self.model_string(),
            latency,
            token_count,
        )
        return choice.message.content or EMPTY_RESPONSE


class OpenAIBackend(ChatCompletionBackend):
    """Hosted OpenAI (or compatible) API via openai SDK."""

    kind = ProviderKind.OPENAI

    def __init__(self, config: ProviderConfig) -> None:
        super().__init__(config)
        if not config.api_key:
            raise ConfigurationError(f"OpenAI API key is required for provider '{config.name}'")
        if config.endpoint:
            self._client = AsyncOpenAI(api_key=config.api_key, base_url=config.endpoint)
        else:
            self._client = AsyncOpenAI(api_key=config.api_key)

    def model_string(self) -> str:
        return self._config.model or "gpt-3.5-turbo"
