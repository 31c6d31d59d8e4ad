"""Load settings.yaml into typed dataclasses. Resolves API keys from the environment."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from podcaster.errors import ConfigurationError
from podcaster.models import ProviderConfig, ProviderKind

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class DefaultsConfig:
    rounds: int
    max_rounds: int
    database_path: Path
    audio_dir: Path
    prompts_dir: Path | None = None
    inbox_dir: Path = Path("inbox")
    archive_dir: Path = Path("inbox/archive")


@dataclass
class SpeechConfig:
    model: str = "tts-1"
    api_key_env: str = "OPENAI_API_KEY"
    response_format: str = "mp3"
    timeout_sec: int = 60
    api_key: str | None = None


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    providers: dict[str, ProviderConfig]
    speech: SpeechConfig = field(default_factory=SpeechConfig)


def _env(name: str | None) -> str | None:
    if not name:
        return None
    value = os.environ.get(name, "").strip()
    return value or None


def _parse_provider(provider_id: str, raw: dict) -> ProviderConfig:
    try:
        kind = ProviderKind(str(raw["kind"]).lower())
    except KeyError as exc:
        raise ConfigurationError(f"Provider '{provider_id}' has no kind") from exc
    except ValueError as exc:
        raise ConfigurationError(f"Provider '{provider_id}' has unknown kind: {raw['kind']}") from exc

    api_key = _env(raw.get("api_key_env"))
    if raw.get("api_key_env") and not api_key:
        logger.info(
            "Provider %s has no API key; set %s in .env",
            provider_id,
            raw["api_key_env"],
        )

    return ProviderConfig(
        id=provider_id,
        name=str(raw.get("name", provider_id)),
        kind=kind,
        api_key=api_key,
        endpoint=raw.get("endpoint"),
        deployment=raw.get("deployment"),
        model=raw.get("model"),
        api_version=raw.get("api_version"),
        timeout_sec=int(raw.get("timeout_sec", 120)),
        active=bool(raw.get("active", True)),
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ConfigurationError for
    a provider with an unknown kind. Missing API keys are logged, not raised:
    the backend refuses to build when the key is actually needed.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    defaults_raw = raw.get("defaults", {})
    prompts_dir = defaults_raw.get("prompts_dir")
    defaults = DefaultsConfig(
        rounds=int(defaults_raw.get("rounds", 3)),
        max_rounds=int(defaults_raw.get("max_rounds", 10)),
        database_path=Path(defaults_raw.get("database_path", "data/podcasts.db")),
        audio_dir=Path(defaults_raw.get("audio_dir", "data/audio")),
        prompts_dir=Path(prompts_dir) if prompts_dir else None,
        inbox_dir=Path(defaults_raw.get("inbox_dir", "inbox")),
        archive_dir=Path(defaults_raw.get("archive_dir", "inbox/archive")),
    )

    providers: dict[str, ProviderConfig] = {}
    for provider_id, provider_raw in (raw.get("providers") or {}).items():
        providers[provider_id] = _parse_provider(provider_id, provider_raw)
        logger.debug("Provider configured: %s (%s)", provider_id, providers[provider_id].kind.value)

    speech_raw = raw.get("speech") or {}
    speech = SpeechConfig(
        model=str(speech_raw.get("model", "tts-1")),
        api_key_env=str(speech_raw.get("api_key_env", "OPENAI_API_KEY")),
        response_format=str(speech_raw.get("response_format", "mp3")),
        timeout_sec=int(speech_raw.get("timeout_sec", 60)),
    )
    speech.api_key = _env(speech.api_key_env)

    return AppConfig(defaults=defaults, providers=providers, speech=speech)
