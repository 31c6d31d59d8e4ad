"""Rich console rendering of sessions, transcripts and providers."""

import logging

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from podcaster.models import Participant, ProviderConfig, Session, SessionStatus, Turn

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_STATUS_STYLES = {
    SessionStatus.CREATED: "cyan",
    SessionStatus.IN_PROGRESS: "yellow",
    SessionStatus.COMPLETED: "green",
    SessionStatus.FAILED: "red",
}


def _preview(text: str, words: int = 12) -> str:
    """Return first N words of a text."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def status_label(status: SessionStatus) -> str:
    return f"[{_STATUS_STYLES[status]}]{status.value}[/{_STATUS_STYLES[status]}]"


def print_turn(turn: Turn, participant: Participant) -> None:
    """Print a single turn as a panel."""
    role = "host" if participant.is_host else "guest"
    subtitle = f"audio: {turn.audio_ref}" if turn.audio_ref else None
    console.print(
        Panel(
            turn.content,
            title=f"[bold]#{turn.order} {participant.name}[/bold] ({role})",
            subtitle=subtitle,
            border_style="dim",
        )
    )


def print_session(session: Session) -> None:
    """Print session header and its full transcript."""
    console.print(Rule(f"[bold cyan]{session.topic}[/bold cyan]"))
    names = ", ".join(
        f"{p.name} (host)" if p.is_host else p.name for p in session.participants
    )
    completed = session.completed_at.strftime("%Y-%m-%d %H:%M:%S") if session.completed_at else "-"
    console.print(
        Text.from_markup(
            f"Session {session.id} | Status: {status_label(session.status)} | "
            f"Rounds: {session.rounds} | Turns: {len(session.turns)} | Completed: {completed}",
            style="dim",
        )
    )
    console.print(f"Participants: {names}\n")
    for turn in session.turns:
        participant = session.participant(turn.participant_id)
        if participant is None:
            logger.warning("Turn %d references unknown participant %d", turn.id, turn.participant_id)
            continue
        print_turn(turn, participant)


def print_sessions(sessions: list[Session]) -> None:
    table = Table(title="Podcast sessions")
    table.add_column("ID", justify="right")
    table.add_column("Topic")
    table.add_column("Participants")
    table.add_column("Status")
    table.add_column("Created")
    for s in sessions:
        table.add_row(
            str(s.id),
            _preview(s.topic, words=8),
            ", ".join(p.name for p in s.participants),
            status_label(s.status),
            s.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


def print_providers(providers: list[ProviderConfig], health: dict[str, tuple[bool, str]] | None = None) -> None:
    table = Table(title="LLM providers")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Model")
    table.add_column("Active")
    if health is not None:
        table.add_column("Health")
    for p in providers:
        row = [
            p.id,
            p.name,
            p.kind.value,
            p.deployment or p.model or "-",
            "yes" if p.active else "no",
        ]
        if health is not None:
            ok, err = health.get(p.id, (False, "not checked"))
            short_err = err.splitlines()[0][:80] if err else "unknown error"
            row.append("[green]OK[/green]" if ok else f"[red]FAIL[/red] {short_err}")
        table.add_row(*row)
    console.print(table)
