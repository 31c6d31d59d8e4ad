"""Episode request files: frontmatter parsing, inbox scanning and archiving."""

import shutil
from datetime import datetime
from pathlib import Path

import frontmatter

from podcaster.errors import InvalidStateError
from podcaster.models import ParticipantRequest


def ensure_dirs(inbox_dir: Path, archive_dir: Path) -> None:
    """Create inbox and archive directories if they don't exist."""
    inbox_dir.mkdir(parents=True, exist_ok=True)
    archive_dir.mkdir(parents=True, exist_ok=True)


def scan_inbox(inbox_dir: Path) -> list[Path]:
    """Return all .md files in inbox_dir, sorted by mtime ascending (oldest first)."""
    files = list(inbox_dir.glob("*.md"))
    return sorted(files, key=lambda p: p.stat().st_mtime)


def _participant(raw: dict, index: int) -> ParticipantRequest:
    try:
        return ParticipantRequest(
            name=str(raw["name"]),
            persona=str(raw.get("persona", "")),
            provider_id=str(raw["provider"]),
            voice=raw.get("voice"),
            is_host=bool(raw.get("host", False)),
        )
    except (KeyError, TypeError) as exc:
        raise InvalidStateError(f"Participant #{index + 1} needs 'name' and 'provider'") from exc


def parse_file(file_path: Path) -> tuple[str, list[ParticipantRequest], int | None]:
    """Parse an episode request: markdown body is the topic.

    Frontmatter keys: ``participants`` (list of name/persona/provider/voice/host
    mappings) and optional ``rounds``.

    Returns:
        (topic, participants, rounds) where rounds is None when not given.
    """
    post = frontmatter.load(str(file_path))
    topic = post.content.strip()
    raw_participants = post.metadata.get("participants") or []
    if not isinstance(raw_participants, list):
        raise InvalidStateError(f"{file_path.name}: 'participants' must be a list")
    participants = [_participant(p, i) for i, p in enumerate(raw_participants)]
    rounds = post.metadata.get("rounds")
    if rounds is None:
        return topic, participants, None
    try:
        return topic, participants, int(rounds)
    except (TypeError, ValueError) as exc:
        raise InvalidStateError(f"{file_path.name}: 'rounds' must be a whole number, got {rounds!r}") from exc


def archive_file(file_path: Path, archive_dir: Path, *, failed: bool = False) -> Path:
    """Move file to archive_dir with a timestamp prefix.

    Args:
        file_path: Source file to archive.
        archive_dir: Destination directory.
        failed: If True, prefix filename with "FAILED_".

    Returns:
        Path to the archived file.
    """
    timestamp = datetime.now().strftime("%Y-%m-%dT%H%M")
    prefix = "FAILED_" if failed else ""
    dest_name = f"{prefix}{timestamp}_{file_path.name}"
    dest = archive_dir / dest_name
    shutil.move(str(file_path), str(dest))
    return dest
