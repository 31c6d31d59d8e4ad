"""Click CLI: wires config, stores, gateway and speech into the podcast service."""

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, load_config
from podcaster.errors import PodcastError
from podcaster.healthcheck import run_health_checks
from podcaster.inbox import archive_file, ensure_dirs, parse_file, scan_inbox
from podcaster.models import Participant, Session, TemplateKind, Turn
from podcaster.output import console, print_providers, print_session, print_sessions, print_turn
from podcaster.podcast import PodcastService
from podcaster.prompts import TemplateResolver, load_template_file
from podcaster.providers.gateway import ModelGateway
from podcaster.speech import SpeechSynthesizer
from podcaster.store import ProviderStore, SessionStore

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    config: AppConfig
    service: PodcastService
    store: SessionStore
    providers: ProviderStore
    templates: TemplateResolver
    gateway: ModelGateway
    speech: SpeechSynthesizer


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_runtime(config: AppConfig) -> Runtime:
    """Construct every collaborator explicitly from config."""
    store = SessionStore(config.defaults.database_path)
    providers = ProviderStore(config.providers)
    templates = TemplateResolver(config.defaults.prompts_dir)
    gateway = ModelGateway()
    speech = SpeechSynthesizer(config.speech, config.defaults.audio_dir)
    service = PodcastService(store, providers, templates, gateway, speech)
    return Runtime(config, service, store, providers, templates, gateway, speech)


def _parse_vars(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse ``key=value`` pairs from repeated --var options."""
    variables: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected key=value, got {pair!r}", param_hint="--var")
        variables[key.strip()] = value
    return variables


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    sys.exit(1)


async def _generate_with_progress(runtime: Runtime, session_id: int) -> Session:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Generating session {session_id}...", total=None)

        def on_turn(turn: Turn, participant: Participant) -> None:
            progress.update(task, description=f"Turn {turn.order + 1}...")
            progress.print(f"[green]OK[/green] Turn {turn.order}: {participant.name}")

        return await runtime.service.generate(session_id, on_turn=on_turn)


async def _create(runtime: Runtime, file_path: Path, rounds: int | None, generate: bool) -> Session:
    topic, participants, file_rounds = parse_file(file_path)
    # CLI flag wins over frontmatter, frontmatter over config default
    effective_rounds = (
        rounds if rounds is not None
        else file_rounds if file_rounds is not None
        else runtime.config.defaults.rounds
    )
    if effective_rounds > runtime.config.defaults.max_rounds:
        raise click.BadParameter(
            f"At most {runtime.config.defaults.max_rounds} rounds allowed, got {effective_rounds}",
            param_hint="--rounds",
        )

    await runtime.store.init()
    session = await runtime.service.create_session(topic, participants, effective_rounds)
    console.print(f"Created session [bold]{session.id}[/bold]: {session.topic}")
    if generate:
        session = await _generate_with_progress(runtime, session.id)
    return session


async def _run_inbox(runtime: Runtime, inbox_dir: Path, archive_dir: Path) -> None:
    """Create and generate a session for every .md file in the inbox folder."""
    ensure_dirs(inbox_dir, archive_dir)
    files = scan_inbox(inbox_dir)

    if not files:
        click.echo("No files in inbox.")
        return

    for file_path in files:
        try:
            session = await _create(runtime, file_path, rounds=None, generate=True)
            archived = archive_file(file_path, archive_dir)
            click.echo(f"Processed: {file_path.name} -> session {session.id} (archived: {archived.name})")
        except Exception as e:
            logger.error("Failed: %s -- %s", file_path.name, e)
            archive_file(file_path, archive_dir, failed=True)


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Path to settings.yaml (default: bundled config)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Podcaster -- multi-participant simulated podcast generator.

    \b
    Examples:
      podcaster providers --check
      podcaster create episode.md --rounds 2 --generate
      podcaster generate 3
      podcaster show 3
      podcaster inbox
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config(Path(config_path)) if config_path else load_config()
    except (FileNotFoundError, PodcastError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    ctx.obj = build_runtime(config)


@main.command()
@click.option("--check", is_flag=True, help="Ping every active provider")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive providers")
@click.pass_obj
def providers(runtime: Runtime, check: bool, include_inactive: bool) -> None:
    """List configured LLM providers."""
    listed = runtime.providers.list_providers(include_inactive=include_inactive)
    health = None
    if check:
        active = [p for p in listed if p.active]
        health = asyncio.run(run_health_checks(runtime.gateway, active))
    print_providers(listed, health)


@main.command()
@click.pass_obj
def voices(runtime: Runtime) -> None:
    """List voices usable in a participant's ``voice`` field."""
    if not runtime.speech.configured:
        console.print("[yellow]Speech service not configured; turns will have no audio.[/yellow]")
    for voice in runtime.speech.available_voices():
        click.echo(voice)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--rounds", default=None, type=int, help="Number of rounds (default: frontmatter, then config)")
@click.option("--generate", "generate_now", is_flag=True, help="Generate the transcript right away")
@click.pass_obj
def create(runtime: Runtime, file: Path, rounds: int | None, generate_now: bool) -> None:
    """Create a session from an episode request FILE."""
    try:
        session = asyncio.run(_create(runtime, file, rounds, generate_now))
    except PodcastError as exc:
        _fail(str(exc))
        return
    if generate_now:
        print_session(session)


@main.command()
@click.argument("session_id", type=int)
@click.pass_obj
def generate(runtime: Runtime, session_id: int) -> None:
    """Generate the transcript for an existing session."""

    async def _run() -> Session:
        await runtime.store.init()
        return await _generate_with_progress(runtime, session_id)

    try:
        session = asyncio.run(_run())
    except PodcastError as exc:
        _fail(str(exc))
        return
    print_session(session)


@main.command()
@click.argument("session_id", type=int)
@click.pass_obj
def show(runtime: Runtime, session_id: int) -> None:
    """Show a session and its transcript."""

    async def _run() -> Session | None:
        await runtime.store.init()
        return await runtime.service.get_session(session_id)

    session = asyncio.run(_run())
    if session is None:
        _fail(f"Session {session_id} not found")
        return
    print_session(session)


@main.command(name="list")
@click.pass_obj
def list_sessions(runtime: Runtime) -> None:
    """List sessions, newest first."""

    async def _run() -> list[Session]:
        await runtime.store.init()
        return await runtime.service.list_sessions()

    sessions = asyncio.run(_run())
    if not sessions:
        click.echo("No sessions yet.")
        return
    print_sessions(sessions)


@main.command()
@click.argument("session_id", type=int)
@click.pass_obj
def delete(runtime: Runtime, session_id: int) -> None:
    """Delete a session, its turns and their audio files."""

    async def _run() -> bool:
        await runtime.store.init()
        return await runtime.service.delete_session(session_id)

    if not asyncio.run(_run()):
        _fail(f"Session {session_id} not found")
        return
    click.echo(f"Deleted session {session_id}")


@main.command()
@click.option("--inbox-dir", "inbox_dir_override", default=None,
              help="Override inbox folder path (default: from config)")
@click.pass_obj
def inbox(runtime: Runtime, inbox_dir_override: str | None) -> None:
    """Process all .md episode requests in the inbox folder."""
    inbox_dir = Path(inbox_dir_override) if inbox_dir_override else runtime.config.defaults.inbox_dir
    asyncio.run(_run_inbox(runtime, inbox_dir, runtime.config.defaults.archive_dir))


@main.group()
def templates() -> None:
    """Inspect, preview and validate prompt templates."""


@templates.command(name="list")
@click.pass_obj
def templates_list(runtime: Runtime) -> None:
    for kind, meta in runtime.templates.list_metadata().items():
        click.echo(f"{kind}: {meta.name} v{meta.version} ({', '.join(meta.variables)})")


@templates.command(name="show")
@click.argument("kind", type=click.Choice([k.value for k in TemplateKind]))
@click.pass_obj
def templates_show(runtime: Runtime, kind: str) -> None:
    template = runtime.templates.get_template(kind)
    if template is None:
        _fail(f"Prompt template not found: {kind}")
        return
    click.echo(template.template)
    s = template.settings
    click.echo(
        f"\nmax_tokens={s.max_tokens} temperature={s.temperature} top_p={s.top_p} top_k={s.top_k} "
        f"frequency_penalty={s.frequency_penalty} presence_penalty={s.presence_penalty} stop={s.stop}"
    )


@templates.command(name="preview")
@click.argument("kind", type=click.Choice([k.value for k in TemplateKind]))
@click.option("--var", "pairs", multiple=True, help="Template variable as key=value (repeatable)")
@click.pass_obj
def templates_preview(runtime: Runtime, kind: str, pairs: tuple[str, ...]) -> None:
    template = runtime.templates.get_template(kind)
    if template is None:
        _fail(f"Prompt template not found: {kind}")
        return
    click.echo(runtime.templates.preview(template.template, _parse_vars(pairs)))


@templates.command(name="validate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def templates_validate(runtime: Runtime, file: Path) -> None:
    """Validate a template YAML FILE."""
    try:
        template = load_template_file(file)
    except PodcastError as exc:
        _fail(str(exc))
        return
    result = runtime.templates.validate(template)
    for err in result.errors:
        console.print(f"[red]error:[/red] {err}")
    for warning in result.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")
    console.print(f"Variables: {', '.join(result.detected_variables) or '-'}")
    if not result.is_valid:
        sys.exit(1)
    console.print("[green]Template is valid[/green]")



@templates.command(name="update")
@click.argument("kind", type=click.Choice([k.value for k in TemplateKind]))
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def templates_update(runtime: Runtime, kind: str, file: Path) -> None:
    """Replace the KIND template with a template YAML FILE and save it to the prompts folder."""
    try:
        runtime.templates.update_template(kind, load_template_file(file))
    except PodcastError as exc:
        _fail(str(exc))
        return
    console.print(f"[green]Updated template {kind}[/green]")


if __name__ == "__main__":
    main()
