"""Dataclasses and enums for podcast sessions, providers and templates. No deps."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ProviderKind(str, Enum):
    OPENAI = "openai"        # OpenAI-compatible hosted API
    AZURE = "azure"          # Azure-style deployment
    LMSTUDIO = "lmstudio"    # local chat-completion server
    OLLAMA = "ollama"        # local generate server


class SessionStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class TemplateKind(str, Enum):
    HOST_INTRO = "host_intro"
    PARTICIPANT_RESPONSE = "participant_response"
    HOST_RESPONSE = "host_response"
    HOST_CONCLUSION = "host_conclusion"


@dataclass
class ProviderConfig:
    id: str
    name: str
    kind: ProviderKind
    api_key: str | None = None
    endpoint: str | None = None
    deployment: str | None = None
    model: str | None = None
    api_version: str | None = None
    timeout_sec: int = 120
    active: bool = True


@dataclass
class GenerationSettings:
    max_tokens: int = 500
    temperature: float = 0.7
    top_p: float | None = None
    top_k: int | None = None
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    stop: list[str] = field(default_factory=list)


@dataclass
class TemplateMetadata:
    name: str = ""
    description: str = ""
    version: str = ""
    variables: list[str] = field(default_factory=list)


@dataclass
class PromptTemplate:
    template: str
    settings: GenerationSettings = field(default_factory=GenerationSettings)
    metadata: TemplateMetadata = field(default_factory=TemplateMetadata)


@dataclass
class TemplateValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    detected_variables: list[str] = field(default_factory=list)


@dataclass
class ParticipantRequest:
    name: str
    persona: str
    provider_id: str
    voice: str | None = None
    is_host: bool = False


@dataclass(frozen=True)
class Participant:
    id: int
    name: str
    persona: str
    provider_id: str
    voice: str | None = None
    is_host: bool = False


@dataclass(frozen=True)
class Turn:
    id: int
    session_id: int
    participant_id: int
    content: str
    order: int              # 1-based position in the transcript
    created_at: datetime
    audio_ref: str | None = None


@dataclass
class Session:
    id: int
    topic: str
    rounds: int
    status: SessionStatus
    created_at: datetime
    completed_at: datetime | None = None
    participants: list[Participant] = field(default_factory=list)
    turns: list[Turn] = field(default_factory=list)

    def participant(self, participant_id: int) -> Participant | None:
        return next((p for p in self.participants if p.id == participant_id), None)
