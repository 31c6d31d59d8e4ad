"""Unit tests for podcaster/inbox.py: no API calls."""

import textwrap
from pathlib import Path

import pytest

from podcaster.errors import InvalidStateError
from podcaster.inbox import archive_file, ensure_dirs, parse_file, scan_inbox


def _episode(tmp_path: Path, text: str) -> Path:
    f = tmp_path / "episode.md"
    f.write_text(textwrap.dedent(text), encoding="utf-8")
    return f


def test_parse_file_with_participants(tmp_path: Path) -> None:
    """Frontmatter participants and rounds are parsed, body becomes the topic."""
    f = _episode(tmp_path, """\
        ---
        rounds: 2
        participants:
          - name: Mia
            persona: Curious science journalist
            provider: gpt4
            voice: nova
            host: true
          - name: Leo
            persona: Retired astronaut
            provider: ollama
        ---
        The future of space travel
    """)
    topic, participants, rounds = parse_file(f)

    assert topic == "The future of space travel"
    assert rounds == 2
    assert [p.name for p in participants] == ["Mia", "Leo"]
    assert participants[0].is_host is True
    assert participants[0].voice == "nova"
    assert participants[1].provider_id == "ollama"
    assert participants[1].is_host is False
    assert participants[1].voice is None


def test_parse_file_without_rounds(tmp_path: Path) -> None:
    f = _episode(tmp_path, """\
        ---
        participants:
          - name: Ann
            provider: gpt4
        ---
        Urban gardening
    """)
    topic, participants, rounds = parse_file(f)
    assert topic == "Urban gardening"
    assert rounds is None
    assert participants[0].persona == ""


def test_parse_file_no_frontmatter(tmp_path: Path) -> None:
    """File without frontmatter yields the topic and no participants."""
    f = _episode(tmp_path, "Should cities ban cars?")
    topic, participants, rounds = parse_file(f)
    assert topic == "Should cities ban cars?"
    assert participants == []
    assert rounds is None


def test_parse_file_participant_missing_provider(tmp_path: Path) -> None:
    f = _episode(tmp_path, """\
        ---
        participants:
          - name: Ann
        ---
        Topic
    """)
    with pytest.raises(InvalidStateError, match="#1"):
        parse_file(f)


def test_parse_file_participants_not_a_list(tmp_path: Path) -> None:
    f = _episode(tmp_path, """\
        ---
        participants: Ann
        ---
        Topic
    """)
    with pytest.raises(InvalidStateError):
        parse_file(f)


def test_archive_file_success(tmp_path: Path) -> None:
    """archive_file() moves file to archive dir with timestamp prefix."""
    inbox = tmp_path / "inbox"
    archive = tmp_path / "archive"
    ensure_dirs(inbox, archive)

    src = inbox / "my-episode.md"
    src.write_text("A topic", encoding="utf-8")

    dest = archive_file(src, archive)

    assert not src.exists(), "Source should be moved"
    assert dest.exists(), "Destination should exist"
    assert dest.parent == archive
    # Timestamp prefix: YYYY-MM-DDTHHMM_my-episode.md
    assert dest.name.endswith("_my-episode.md")
    assert not dest.name.startswith("FAILED_")


def test_archive_file_failed(tmp_path: Path) -> None:
    """archive_file(failed=True) prefixes filename with FAILED_."""
    inbox = tmp_path / "inbox"
    archive = tmp_path / "archive"
    ensure_dirs(inbox, archive)

    src = inbox / "broken.md"
    src.write_text("Bad episode", encoding="utf-8")

    dest = archive_file(src, archive, failed=True)

    assert not src.exists()
    assert dest.name.startswith("FAILED_")
    assert "broken.md" in dest.name


def test_scan_inbox_empty(tmp_path: Path) -> None:
    """scan_inbox() on an empty directory returns an empty list."""
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    assert scan_inbox(inbox) == []


def test_scan_inbox_only_markdown(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_text("A", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("B", encoding="utf-8")
    assert [p.name for p in scan_inbox(tmp_path)] == ["a.md"]


def test_parse_file_rounds_not_a_number(tmp_path: Path) -> None:
    f = _episode(tmp_path, """\
        ---
        rounds: three
        participants:
          - name: Ann
            provider: gpt4
        ---
        Topic
    """)
    with pytest.raises(InvalidStateError, match="rounds"):
        parse_file(f)
