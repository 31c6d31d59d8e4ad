"""SQLite persistence for sessions, participants and turns, plus the provider view."""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from podcaster.errors import NotFoundError
from podcaster.models import (
    Participant,
    ParticipantRequest,
    ProviderConfig,
    Session,
    SessionStatus,
    Turn,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    topic TEXT NOT NULL,
    rounds INTEGER NOT NULL DEFAULT 3,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL,
    completed_at TEXT
);

CREATE TABLE IF NOT EXISTS participants (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id INTEGER NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    name TEXT NOT NULL,
    persona TEXT NOT NULL,
    provider_id TEXT NOT NULL,
    voice TEXT,
    is_host INTEGER NOT NULL DEFAULT 0,
    UNIQUE (session_id, name)
);

CREATE TABLE IF NOT EXISTS turns (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id INTEGER NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    participant_id INTEGER NOT NULL REFERENCES participants(id) ON DELETE CASCADE,
    content TEXT NOT NULL,
    audio_ref TEXT,
    position INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (session_id, position)
);
"""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SessionStore:
    """Durable session storage. Every method is a single atomic write or read.

    A connection is opened per call so concurrent sessions never share state.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = str(db_path)

    async def _connect(self) -> aiosqlite.Connection:
        db = await aiosqlite.connect(self._db_path)
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        return db

    async def init(self) -> None:
        """Create tables if missing."""
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        db = await self._connect()
        try:
            await db.executescript(_SCHEMA)
            await db.commit()
        finally:
            await db.close()
        logger.debug("Session store ready at %s", self._db_path)

    async def create_session(
        self,
        topic: str,
        participants: Iterable[ParticipantRequest],
        rounds: int,
    ) -> Session:
        created_at = _now()
        db = await self._connect()
        try:
            cursor = await db.execute(
                "INSERT INTO sessions (topic, rounds, status, created_at) VALUES (?, ?, ?, ?)",
                (topic, rounds, SessionStatus.CREATED.value, created_at.isoformat()),
            )
            session_id = cursor.lastrowid
            for position, p in enumerate(participants):
                await db.execute(
                    "INSERT INTO participants "
                    "(session_id, position, name, persona, provider_id, voice, is_host) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (session_id, position, p.name, p.persona, p.provider_id, p.voice, int(p.is_host)),
                )
            await db.commit()
        finally:
            await db.close()

        logger.info("Created session %d: %s", session_id, topic)
        session = await self.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Podcast session with ID {session_id} not found")
        return session

    async def _load(self, db: aiosqlite.Connection, row: aiosqlite.Row, with_turns: bool) -> Session:
        session = Session(
            id=row["id"],
            topic=row["topic"],
            rounds=row["rounds"],
            status=SessionStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            completed_at=_parse_ts(row["completed_at"]),
        )
        async with db.execute(
            "SELECT * FROM participants WHERE session_id = ? ORDER BY position",
            (session.id,),
        ) as cursor:
            session.participants = [
                Participant(
                    id=p["id"],
                    name=p["name"],
                    persona=p["persona"],
                    provider_id=p["provider_id"],
                    voice=p["voice"],
                    is_host=bool(p["is_host"]),
                )
                async for p in cursor
            ]
        if with_turns:
            async with db.execute(
                "SELECT * FROM turns WHERE session_id = ? ORDER BY position",
                (session.id,),
            ) as cursor:
                session.turns = [
                    Turn(
                        id=t["id"],
                        session_id=t["session_id"],
                        participant_id=t["participant_id"],
                        content=t["content"],
                        order=t["position"],
                        created_at=datetime.fromisoformat(t["created_at"]),
                        audio_ref=t["audio_ref"],
                    )
                    async for t in cursor
                ]
        return session

    async def get_session(self, session_id: int) -> Session | None:
        db = await self._connect()
        try:
            async with db.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)) as cursor:
                row = await cursor.fetchone()
            if row is None:
                return None
            return await self._load(db, row, with_turns=True)
        finally:
            await db.close()

    async def list_sessions(self) -> list[Session]:
        """All sessions with participants (no turns), newest first."""
        db = await self._connect()
        try:
            async with db.execute("SELECT * FROM sessions ORDER BY created_at DESC, id DESC") as cursor:
                rows = await cursor.fetchall()
            return [await self._load(db, row, with_turns=False) for row in rows]
        finally:
            await db.close()

    async def append_turn(
        self,
        session_id: int,
        participant_id: int,
        content: str,
        order: int,
        audio_ref: str | None = None,
    ) -> Turn:
        created_at = _now()
        db = await self._connect()
        try:
            cursor = await db.execute(
                "INSERT INTO turns (session_id, participant_id, content, audio_ref, position, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (session_id, participant_id, content, audio_ref, order, created_at.isoformat()),
            )
            await db.commit()
            turn_id = cursor.lastrowid
        finally:
            await db.close()

        return Turn(
            id=turn_id,
            session_id=session_id,
            participant_id=participant_id,
            content=content,
            order=order,
            created_at=created_at,
            audio_ref=audio_ref,
        )

    async def set_status(
        self,
        session_id: int,
        status: SessionStatus,
        completed_at: datetime | None = None,
    ) -> None:
        db = await self._connect()
        try:
            await db.execute(
                "UPDATE sessions SET status = ?, completed_at = ? WHERE id = ?",
                (status.value, completed_at.isoformat() if completed_at else None, session_id),
            )
            await db.commit()
        finally:
            await db.close()
        logger.debug("Session %d status -> %s", session_id, status.value)

    async def clear_turns(self, session_id: int) -> int:
        """Delete every turn of a session. Returns the number removed."""
        db = await self._connect()
        try:
            cursor = await db.execute("DELETE FROM turns WHERE session_id = ?", (session_id,))
            await db.commit()
            return cursor.rowcount
        finally:
            await db.close()

    async def delete_session(self, session_id: int) -> bool:
        """Delete a session; participants and turns cascade."""
        db = await self._connect()
        try:
            cursor = await db.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
            await db.commit()
            return cursor.rowcount > 0
        finally:
            await db.close()


class ProviderStore:
    """Read-only view over configured providers."""

    def __init__(self, providers: dict[str, ProviderConfig]) -> None:
        self._providers = dict(providers)

    def get_provider(self, provider_id: str) -> ProviderConfig | None:
        """Return an active provider, or None if unknown or inactive."""
        provider = self._providers.get(provider_id)
        if provider is None or not provider.active:
            return None
        return provider

    def list_providers(self, include_inactive: bool = False) -> list[ProviderConfig]:
        providers = sorted(self._providers.values(), key=lambda p: p.name)
        if include_inactive:
            return providers
        return [p for p in providers if p.active]
