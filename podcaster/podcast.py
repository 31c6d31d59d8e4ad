"""Conversation orchestration: session lifecycle and the turn-taking state machine."""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from podcaster.context import (
    CONCLUSION_CONTEXT_WINDOW,
    ROUND_CONTEXT_WINDOW,
    build_context,
    join_names,
)
from podcaster.errors import InvalidStateError, NotFoundError
from podcaster.models import (
    Participant,
    ParticipantRequest,
    Session,
    SessionStatus,
    TemplateKind,
    Turn,
)
from podcaster.prompts import TemplateResolver
from podcaster.providers.gateway import ModelGateway
from podcaster.sanitizer import sanitize
from podcaster.speech import SpeechSynthesizer
from podcaster.store import ProviderStore, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 3

# The host interjects after rounds 0 and 1 only, whatever the total round count
_HOST_RESPONSE_ROUND_LIMIT = 2

_GENERATABLE = (SessionStatus.CREATED, SessionStatus.FAILED)


def resolve_host(participants: Sequence[Participant]) -> Participant:
    """The participant flagged as host, or the first one if none is flagged."""
    if not participants:
        raise InvalidStateError("Session has no participants")
    return next((p for p in participants if p.is_host), participants[0])


def split_guests(participants: Sequence[Participant], host: Participant) -> list[Participant]:
    """Every participant except the host, in stored order."""
    return [p for p in participants if p.id != host.id]


def normalize_hosts(participants: Sequence[ParticipantRequest]) -> list[ParticipantRequest]:
    """Return requests with exactly one host flag.

    The first flagged participant stays host; with none flagged the first
    participant is promoted.
    """
    host_index = next((i for i, p in enumerate(participants) if p.is_host), 0)
    return [
        ParticipantRequest(
            name=p.name,
            persona=p.persona,
            provider_id=p.provider_id,
            voice=p.voice,
            is_host=(i == host_index),
        )
        for i, p in enumerate(participants)
    ]


class PodcastService:
    """Creates sessions and drives their generation end to end.

    All collaborators are passed in; the service holds no per-session state
    between calls, so separate sessions can generate concurrently.
    """

    def __init__(
        self,
        store: SessionStore,
        providers: ProviderStore,
        templates: TemplateResolver,
        gateway: ModelGateway,
        speech: SpeechSynthesizer | None = None,
    ) -> None:
        self._store = store
        self._providers = providers
        self._templates = templates
        self._gateway = gateway
        self._speech = speech

    async def create_session(
        self,
        topic: str,
        participants: Sequence[ParticipantRequest],
        rounds: int = DEFAULT_ROUNDS,
    ) -> Session:
        """Validate the request and persist a new session in ``created`` status.

        Raises:
            InvalidStateError: Empty topic, no participants, rounds < 1, or
                duplicate participant names.
            NotFoundError: A participant references an unknown or inactive provider.
        """
        if not topic or not topic.strip():
            raise InvalidStateError("Topic must not be empty")
        if not participants:
            raise InvalidStateError("A session needs at least one participant")
        if rounds < 1:
            raise InvalidStateError(f"Rounds must be at least 1, got {rounds}")

        seen: set[str] = set()
        for p in participants:
            key = p.name.strip().lower()
            if not key:
                raise InvalidStateError("Participant name must not be empty")
            if key in seen:
                raise InvalidStateError(f"Duplicate participant name: {p.name}")
            seen.add(key)
            if self._providers.get_provider(p.provider_id) is None:
                raise NotFoundError(f"LLM provider '{p.provider_id}' not found")

        return await self._store.create_session(topic.strip(), normalize_hosts(participants), rounds)

    async def get_session(self, session_id: int) -> Session | None:
        return await self._store.get_session(session_id)

    async def list_sessions(self) -> list[Session]:
        return await self._store.list_sessions()

    async def delete_session(self, session_id: int) -> bool:
        """Delete a session and, separately, the audio files its turns reference."""
        session = await self._store.get_session(session_id)
        if session is None:
            return False

        self._delete_audio(session.turns)
        deleted = await self._store.delete_session(session_id)
        logger.info("Deleted podcast session %d", session_id)
        return deleted

    async def generate(
        self,
        session_id: int,
        on_turn: Callable[[Turn, Participant], None] | None = None,
    ) -> Session:
        """Generate the full transcript for a session.

        Args:
            session_id: Session in ``created`` or ``failed`` status.
            on_turn: Optional callback invoked after each turn is persisted.

        Returns:
            The reloaded session in ``completed`` status with its turns.

        Raises:
            NotFoundError: Unknown session.
            InvalidStateError: No participants, or the session is
                ``in_progress``/``completed``.
            Exception: Whatever aborted the turn sequence; the session is
                marked ``failed`` first and earlier turns are kept.
        """
        session = await self._store.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Podcast session with ID {session_id} not found")
        if not session.participants:
            raise InvalidStateError(f"Podcast session {session_id} has no participants")
        if session.status not in _GENERATABLE:
            raise InvalidStateError(
                f"Podcast session {session_id} is {session.status.value}; "
                "only created or failed sessions can be generated"
            )

        if session.status is SessionStatus.FAILED and session.turns:
            self._delete_audio(session.turns)
            removed = await self._store.clear_turns(session_id)
            logger.info("Cleared %d partial turns from failed session %d", removed, session_id)

        await self._store.set_status(session_id, SessionStatus.IN_PROGRESS)

        try:
            await self._run(session, on_turn)
        except Exception:
            logger.exception("Error generating podcast for session %d", session_id)
            await self._store.set_status(session_id, SessionStatus.FAILED)
            raise

        await self._store.set_status(session_id, SessionStatus.COMPLETED, datetime.now(timezone.utc))
        logger.info("Session %d completed", session_id)

        completed = await self._store.get_session(session_id)
        if completed is None:
            raise NotFoundError(f"Podcast session with ID {session_id} not found")
        return completed

    def _delete_audio(self, turns: Sequence[Turn]) -> None:
        """Remove the audio files behind turns; failures are logged."""
        if self._speech is None:
            return
        for turn in turns:
            if not turn.audio_ref:
                continue
            try:
                self._speech.delete_audio(turn.audio_ref)
            except OSError as exc:
                logger.warning("Failed to delete audio file for turn %d: %s", turn.id, exc)

    async def _run(
        self,
        session: Session,
        on_turn: Callable[[Turn, Participant], None] | None,
    ) -> None:
        host = resolve_host(session.participants)
        guests = split_guests(session.participants, host)
        history: list[str] = []
        order = 1

        async def speak(participant: Participant, kind: TemplateKind, variables: dict[str, str]) -> None:
            nonlocal order
            text = await self._produce(participant, kind, variables)
            audio_ref = await self._synthesize(text, participant)
            turn = await self._store.append_turn(session.id, participant.id, text, order, audio_ref=audio_ref)
            history.append(text)
            logger.info("Session %d turn %d: %s (%s)", session.id, order, participant.name, kind.value)
            order += 1
            if on_turn:
                on_turn(turn, participant)

        await speak(host, TemplateKind.HOST_INTRO, {
            "topic": session.topic,
            "host_persona": host.persona,
            "participant_names": join_names([g.name for g in guests]),
        })

        for round_index in range(session.rounds):
            for guest in guests:
                await speak(guest, TemplateKind.PARTICIPANT_RESPONSE, {
                    "topic": session.topic,
                    "participant_persona": guest.persona,
                    "context": build_context(history, ROUND_CONTEXT_WINDOW),
                })

            if round_index < _HOST_RESPONSE_ROUND_LIMIT:
                await speak(host, TemplateKind.HOST_RESPONSE, {
                    "topic": session.topic,
                    "host_persona": host.persona,
                    "context": build_context(history, ROUND_CONTEXT_WINDOW),
                })

        await speak(host, TemplateKind.HOST_CONCLUSION, {
            "topic": session.topic,
            "host_persona": host.persona,
            "context": build_context(history, CONCLUSION_CONTEXT_WINDOW),
        })

    async def _produce(self, participant: Participant, kind: TemplateKind, variables: dict[str, str]) -> str:
        """Render, generate and sanitize one turn's text."""
        provider = self._providers.get_provider(participant.provider_id)
        if provider is None:
            raise NotFoundError(f"LLM provider '{participant.provider_id}' not found")

        prompt = self._templates.render_prompt(kind.value, variables)
        settings = self._templates.get_settings(kind.value)
        raw = await self._gateway.generate(provider, prompt, participant.persona, settings)
        return sanitize(raw, participant.name)

    async def _synthesize(self, text: str, participant: Participant) -> str | None:
        if not participant.voice or self._speech is None:
            return None
        try:
            return await self._speech.synthesize(text, participant.voice)
        except Exception as exc:
            logger.warning("Failed to generate audio for turn from %s: %s", participant.name, exc)
            return None
