"""Local generate server (Ollama) over plain HTTP with httpx."""

import logging
import time
from typing import Any

import httpx

from podcaster.errors import ConfigurationError
from podcaster.models import GenerationSettings, ProviderConfig, ProviderKind
from podcaster.providers.base import EMPTY_RESPONSE, ModelBackend, ProviderError, system_message

logger = logging.getLogger(__name__)


class OllamaBackend(ModelBackend):
    """Ollama ``/api/generate`` with streaming disabled."""

    kind = ProviderKind.OLLAMA
    default_max_tokens = 150

    def __init__(self, config: ProviderConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(config)
        if not config.endpoint:
            raise ConfigurationError(f"Ollama endpoint is required for provider '{config.name}'")
        self._url = f"{config.endpoint.rstrip('/')}/api/generate"
        self._transport = transport

    def model_string(self) -> str:
        return self._config.model or "llama2"

    def _payload(self, prompt: str, persona: str, settings: GenerationSettings | None) -> dict[str, Any]:
        options: dict[str, Any] = {
            "temperature": self._temperature(settings),
            "num_predict": self._max_tokens(settings),
        }
        if settings is not None:
            if settings.top_p is not None:
                options["top_p"] = settings.top_p
            if settings.top_k is not None:
                options["top_k"] = settings.top_k
            options["frequency_penalty"] = settings.frequency_penalty
            options["presence_penalty"] = settings.presence_penalty
            if settings.stop:
                options["stop"] = settings.stop
        return {
            "model": self.model_string(),
            "prompt": f"{system_message(persona)}\n\nUser: {prompt}\n\nAssistant:",
            "stream": False,
            "options": options,
        }

    async def complete(
        self,
        prompt: str,
        persona: str,
        settings: GenerationSettings | None = None,
    ) -> str:
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout_sec, transport=self._transport) as client:
                response = await client.post(self._url, json=self._payload(prompt, persona, settings))
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        if not isinstance(body, dict) or "response" not in body:
            raise ProviderError(self._config.name, "Malformed response: missing 'response' field")

        logger.info("ollama %s: %.2fs", self.model_string(), time.monotonic() - start)
        return body["response"] or EMPTY_RESPONSE
