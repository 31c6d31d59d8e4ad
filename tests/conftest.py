"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from podcaster.models import (
    GenerationSettings,
    ParticipantRequest,
    ProviderConfig,
    ProviderKind,
)
from podcaster.podcast import PodcastService
from podcaster.prompts import TemplateResolver
from podcaster.providers.base import ModelBackend
from podcaster.providers.gateway import ModelGateway
from podcaster.store import ProviderStore, SessionStore


@pytest.fixture
def openai_provider() -> ProviderConfig:
    return ProviderConfig(
        id="gpt",
        name="Test GPT",
        kind=ProviderKind.OPENAI,
        api_key="sk-test",
        model="gpt-test",
        timeout_sec=30,
    )


@pytest.fixture
def ollama_provider() -> ProviderConfig:
    return ProviderConfig(
        id="llama",
        name="Test Ollama",
        kind=ProviderKind.OLLAMA,
        endpoint="http://localhost:11434",
        model="llama-test",
        timeout_sec=30,
    )


@pytest.fixture
def provider_store(openai_provider: ProviderConfig, ollama_provider: ProviderConfig) -> ProviderStore:
    inactive = ProviderConfig(id="off", name="Disabled", kind=ProviderKind.OPENAI, api_key="k", active=False)
    return ProviderStore({"gpt": openai_provider, "llama": ollama_provider, "off": inactive})


@pytest.fixture
def templates() -> TemplateResolver:
    return TemplateResolver()


@pytest.fixture
async def session_store(tmp_path: Path) -> SessionStore:
    store = SessionStore(tmp_path / "podcasts.db")
    await store.init()
    return store


class MockGateway(ModelGateway):
    """Test double gateway returning numbered replies."""

    def __init__(self) -> None:
        super().__init__(backends={})
        self.calls = 0

        async def reply(provider, prompt, persona, settings=None) -> str:
            self.calls += 1
            return f"Reply {self.calls}"

        # Shadow the method with an AsyncMock so tests can inspect calls
        self.generate = AsyncMock(side_effect=reply)  # type: ignore[method-assign]


@pytest.fixture
def mock_gateway() -> MockGateway:
    return MockGateway()


class MockBackend(ModelBackend):
    """Test double backend."""

    kind = ProviderKind.OPENAI

    def __init__(self, config: ProviderConfig, response: str = "Mock response") -> None:
        super().__init__(config)
        self.complete = AsyncMock(return_value=response)  # type: ignore[method-assign]

    def model_string(self) -> str:
        return "mock-model"

    async def complete(  # type: ignore[override]
        self,
        prompt: str,
        persona: str,
        settings: GenerationSettings | None = None,
    ) -> str:
        """Default implementation; replaced by AsyncMock in __init__."""
        return "Mock response"


@pytest.fixture
def service(
    session_store: SessionStore,
    provider_store: ProviderStore,
    templates: TemplateResolver,
    mock_gateway: MockGateway,
) -> PodcastService:
    return PodcastService(session_store, provider_store, templates, mock_gateway)


@pytest.fixture
def space_travel_participants() -> list[ParticipantRequest]:
    return [
        ParticipantRequest(name="Mia", persona="Curious science journalist", provider_id="gpt", is_host=True),
        ParticipantRequest(name="Leo", persona="Retired astronaut", provider_id="llama"),
    ]


@pytest.fixture
def panel_participants() -> list[ParticipantRequest]:
    return [
        ParticipantRequest(name="Ava", persona="Economist", provider_id="gpt"),
        ParticipantRequest(name="Ben", persona="Historian", provider_id="gpt", is_host=True),
        ParticipantRequest(name="Cal", persona="Engineer", provider_id="llama"),
    ]
