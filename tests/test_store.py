"""Tests for podcaster/store.py against a temporary SQLite file."""

from podcaster.models import ParticipantRequest, SessionStatus
from podcaster.store import ProviderStore, SessionStore


def _requests() -> list[ParticipantRequest]:
    return [
        ParticipantRequest("Host", "Moderator", "gpt", voice="nova", is_host=True),
        ParticipantRequest("Guest", "Expert", "llama"),
    ]


async def test_create_and_get_session(session_store: SessionStore):
    created = await session_store.create_session("Oceans", _requests(), rounds=2)

    loaded = await session_store.get_session(created.id)
    assert loaded is not None
    assert loaded.topic == "Oceans"
    assert loaded.rounds == 2
    assert loaded.status is SessionStatus.CREATED
    assert loaded.completed_at is None
    assert [p.name for p in loaded.participants] == ["Host", "Guest"]
    assert loaded.participants[0].is_host is True
    assert loaded.participants[0].voice == "nova"
    assert loaded.turns == []


async def test_get_missing_session(session_store: SessionStore):
    assert await session_store.get_session(42) is None


async def test_append_turns_in_order(session_store: SessionStore):
    session = await session_store.create_session("Oceans", _requests(), rounds=1)
    host, guest = session.participants

    await session_store.append_turn(session.id, host.id, "Welcome", 1)
    await session_store.append_turn(session.id, guest.id, "Thanks", 2, audio_ref="/audio/a.mp3")

    loaded = await session_store.get_session(session.id)
    assert [(t.order, t.content) for t in loaded.turns] == [(1, "Welcome"), (2, "Thanks")]
    assert loaded.turns[1].audio_ref == "/audio/a.mp3"
    assert loaded.participant(loaded.turns[1].participant_id).name == "Guest"


async def test_set_status_and_completed_at(session_store: SessionStore):
    from datetime import datetime, timezone

    session = await session_store.create_session("Oceans", _requests(), rounds=1)
    done = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    await session_store.set_status(session.id, SessionStatus.COMPLETED, done)

    loaded = await session_store.get_session(session.id)
    assert loaded.status is SessionStatus.COMPLETED
    assert loaded.completed_at == done


async def test_clear_turns(session_store: SessionStore):
    session = await session_store.create_session("Oceans", _requests(), rounds=1)
    host = session.participants[0]
    await session_store.append_turn(session.id, host.id, "a", 1)
    await session_store.append_turn(session.id, host.id, "b", 2)

    assert await session_store.clear_turns(session.id) == 2
    assert (await session_store.get_session(session.id)).turns == []


async def test_delete_session_cascades(session_store: SessionStore):
    session = await session_store.create_session("Oceans", _requests(), rounds=1)
    await session_store.append_turn(session.id, session.participants[0].id, "a", 1)

    assert await session_store.delete_session(session.id) is True
    assert await session_store.get_session(session.id) is None
    assert await session_store.delete_session(session.id) is False


async def test_list_sessions_without_turns(session_store: SessionStore):
    first = await session_store.create_session("One", _requests(), rounds=1)
    await session_store.append_turn(first.id, first.participants[0].id, "a", 1)
    second = await session_store.create_session("Two", _requests(), rounds=1)

    listed = await session_store.list_sessions()
    assert [s.id for s in listed] == [second.id, first.id]
    assert all(s.turns == [] for s in listed)
    assert len(listed[0].participants) == 2


async def test_init_creates_parent_directory(tmp_path):
    store = SessionStore(tmp_path / "nested" / "dir" / "p.db")
    await store.init()
    assert (tmp_path / "nested" / "dir" / "p.db").exists()


def test_provider_store_hides_inactive(provider_store: ProviderStore):
    assert provider_store.get_provider("gpt") is not None
    assert provider_store.get_provider("off") is None
    assert provider_store.get_provider("missing") is None


def test_provider_store_listing(provider_store: ProviderStore):
    assert [p.id for p in provider_store.list_providers()] == ["gpt", "llama"]
    assert [p.id for p in provider_store.list_providers(include_inactive=True)] == ["off", "gpt", "llama"]
