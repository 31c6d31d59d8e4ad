"""Text-to-speech for turns via the openai SDK speech endpoint."""

import asyncio
import logging
import uuid
from pathlib import Path

from openai import AsyncOpenAI

from config.config_loader import SpeechConfig

logger = logging.getLogger(__name__)

# Audio references are served from this URL prefix
AUDIO_URL_PREFIX = "/audio/"

VOICES: tuple[str, ...] = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")


class SpeechSynthesizer:
    """Converts turn text to audio files under ``audio_dir``.

    Returns None instead of raising whenever synthesis cannot happen, so a
    missing or broken speech service never aborts transcript generation.
    """

    def __init__(self, config: SpeechConfig, audio_dir: Path, client: AsyncOpenAI | None = None) -> None:
        self._config = config
        self._audio_dir = audio_dir
        self._client = client
        if self._client is None and config.api_key:
            self._client = AsyncOpenAI(api_key=config.api_key)

    @property
    def configured(self) -> bool:
        return self._client is not None

    def available_voices(self) -> list[str]:
        return list(VOICES)

    async def synthesize(self, text: str, voice: str) -> str | None:
        if self._client is None:
            logger.warning("Speech service not configured. Skipping text-to-speech.")
            return None

        try:
            response = await asyncio.wait_for(
                self._client.audio.speech.create(
                    model=self._config.model,
                    voice=voice,
                    input=text,
                    response_format=self._config.response_format,
                ),
                timeout=self._config.timeout_sec,
            )
            audio = response.content
            file_name = f"audio_{uuid.uuid4().hex}.{self._config.response_format}"
            self._audio_dir.mkdir(parents=True, exist_ok=True)
            (self._audio_dir / file_name).write_bytes(audio)
        except Exception as exc:
            logger.warning("Speech synthesis failed for voice %s: %s", voice, exc)
            return None

        logger.debug("Synthesized %d bytes of audio for voice %s", len(audio), voice)
        return f"{AUDIO_URL_PREFIX}{file_name}"

    def audio_path(self, audio_ref: str) -> Path:
        return self._audio_dir / Path(audio_ref.removeprefix(AUDIO_URL_PREFIX)).name

    def delete_audio(self, audio_ref: str) -> bool:
        """Remove the file behind an audio reference. Returns False if absent."""
        path = self.audio_path(audio_ref)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted audio file: %s", path)
        return True
