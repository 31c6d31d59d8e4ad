"""Tests for podcaster/speech.py. The openai client is mocked."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from config.config_loader import SpeechConfig
from podcaster.speech import AUDIO_URL_PREFIX, VOICES, SpeechSynthesizer


def _client(content: bytes = b"ID3audio", side_effect=None) -> MagicMock:
    client = MagicMock()
    client.audio.speech.create = AsyncMock(
        return_value=SimpleNamespace(content=content), side_effect=side_effect
    )
    return client


def test_unconfigured_without_key(tmp_path: Path):
    speech = SpeechSynthesizer(SpeechConfig(api_key=None), tmp_path)
    assert speech.configured is False


def test_available_voices(tmp_path: Path):
    speech = SpeechSynthesizer(SpeechConfig(), tmp_path)
    assert speech.available_voices() == list(VOICES)
    assert "nova" in speech.available_voices()


async def test_unconfigured_returns_none(tmp_path: Path):
    speech = SpeechSynthesizer(SpeechConfig(api_key=None), tmp_path)
    assert await speech.synthesize("Hello", "nova") is None
    assert list(tmp_path.iterdir()) == []


async def test_synthesize_writes_file(tmp_path: Path):
    client = _client()
    audio_dir = tmp_path / "audio"
    speech = SpeechSynthesizer(SpeechConfig(model="tts-1-hd", response_format="wav"), audio_dir, client=client)

    ref = await speech.synthesize("Hello listeners", "echo")

    assert ref is not None
    assert ref.startswith(AUDIO_URL_PREFIX)
    assert ref.endswith(".wav")
    assert speech.audio_path(ref).read_bytes() == b"ID3audio"
    client.audio.speech.create.assert_awaited_once_with(
        model="tts-1-hd", voice="echo", input="Hello listeners", response_format="wav"
    )


async def test_synthesize_failure_returns_none(tmp_path: Path):
    client = _client(side_effect=RuntimeError("quota exceeded"))
    speech = SpeechSynthesizer(SpeechConfig(), tmp_path, client=client)
    assert await speech.synthesize("Hello", "nova") is None


async def test_delete_audio(tmp_path: Path):
    speech = SpeechSynthesizer(SpeechConfig(), tmp_path, client=_client())
    ref = await speech.synthesize("Hello", "nova")

    assert speech.delete_audio(ref) is True
    assert not speech.audio_path(ref).exists()
    assert speech.delete_audio(ref) is False


def test_audio_path_ignores_directories(tmp_path: Path):
    speech = SpeechSynthesizer(SpeechConfig(), tmp_path)
    assert speech.audio_path("/audio/../../etc/passwd") == tmp_path / "passwd"
