"""Command-line entry point for journal-ai."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from journal_ai.config import AppConfig, load_config
from journal_ai.doctor import run_checks
from journal_ai.errors import (
    RECOVERABLE_CALL_ERRORS,
    ConfigError,
    EmptyInputError,
    ExitCode,
    PersistFailedError,
)
from journal_ai.llm import build_providers
from journal_ai.models import Failure, ProviderId, StructuredEntry
from journal_ai.publish import JournalSink, handoff
from journal_ai.publish.file_journal import FileJournalSink
from journal_ai.structuring import StructuringOrchestrator

app = typer.Typer(
    name="journal-ai",
    help="AI-powered journal entry creation.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("journal_ai")


def make_sink() -> JournalSink:
    return FileJournalSink()


def make_client() -> httpx.Client:
    return httpx.Client()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from journal_ai import __version__

        console.print(f"journal-ai {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False, markup=False))


def _parse_provider(value: Optional[str]) -> Optional[ProviderId]:
    if value is None:
        return None
    try:
        return ProviderId.parse(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _read_stdin() -> str:
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read()


def _print_entry(entry: StructuredEntry) -> None:
    body = Text()
    body.append("Title: ", style="bold")
    body.append(f"{entry.title}\n")
    body.append("Content: ", style="bold")
    body.append(entry.content)
    if entry.tags:
        body.append("\nTags: ", style="bold")
        body.append(", ".join(entry.tags))
    console.print(Panel(body, title="Preview", subtitle=f"via {entry.source_provider.value}"))


def _print_attempts(outcome: Failure) -> None:
    table = Table(title="Provider attempts")
    table.add_column("#", justify="right")
    table.add_column("Provider")
    table.add_column("Retry")
    table.add_column("Error")
    table.add_column("Transient")
    table.add_column("Reason", overflow="fold")
    for index, attempt in enumerate(outcome.attempts, 1):
        table.add_row(
            str(index),
            attempt.provider_id.value,
            "yes" if attempt.reparse else "",
            attempt.error_kind.value if attempt.error_kind else "",
            "yes" if attempt.error_kind in RECOVERABLE_CALL_ERRORS else "",
            Text(attempt.failure_reason or ""),
        )
    err_console.print(table)


def _doctor(config: AppConfig) -> None:
    with make_client() as client:
        checks = run_checks(config, make_sink(), client)

    failed = False
    for check in checks:
        mark = "[green]✓[/green]" if check.ok else "[red]✗[/red]"
        console.print(f"{mark} [bold]{check.name}[/bold]: ", Text(check.detail), sep="")
        if check.hint:
            console.print("  ", Text(check.hint, style="dim"), sep="")
        failed = failed or not check.ok

    console.print("\nDoctor check complete.")
    raise typer.Exit(int(ExitCode.CONFIG_ERROR) if failed else 0)


@app.command()
def main(
    text: Annotated[
        Optional[str],
        typer.Argument(help="The note content. Read from stdin when omitted."),
    ] = None,
    provider: Annotated[
        Optional[str],
        typer.Option(
            "--provider",
            "-p",
            help="Use only this provider (local or cloud; ollama and openai also work), with no fallback.",
            callback=_parse_provider,
        ),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="Model for the selected (or first) provider."),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a TOML config file."),
    ] = None,
    preview: Annotated[
        bool, typer.Option("--preview", help="Print the structured entry, then save it.")
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Print the structured entry without saving it.")
    ] = False,
    json_output: Annotated[
        bool, typer.Option("--json", help="Print the structured entry as JSON.")
    ] = False,
    doctor: Annotated[
        bool, typer.Option("--doctor", help="Check that everything is set up correctly.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Enable debug logging.")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Turn free-form text into a structured journal entry and save it with file-journal."""
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        err_console.print(Text(f"Configuration error: {e}", style="red"))
        raise typer.Exit(int(ExitCode.CONFIG_ERROR))

    if model:
        config.with_model_override(provider or config.provider_order[0], model)

    if doctor:
        _doctor(config)

    raw_text = text if text is not None else _read_stdin()
    sink = make_sink()

    try:
        with make_client() as client:
            providers = build_providers(config, client, only=provider)
            orchestrator = StructuringOrchestrator(providers, max_tags=config.max_tags)
            names = ", ".join(p.provider_id.value for p in providers)
            err_console.print(f"Generating journal entry using {names}...")
            outcome = orchestrator.run(raw_text, provider)
    except EmptyInputError as e:
        err_console.print(Text(str(e), style="red"))
        err_console.print("Example: journal-ai 'My note here'  or  echo 'My note' | journal-ai")
        raise typer.Exit(int(ExitCode.VALIDATION_FAILED))
    except KeyboardInterrupt:
        err_console.print("Interrupted; nothing was saved.")
        raise typer.Exit(int(ExitCode.INTERRUPTED))

    if isinstance(outcome, Failure):
        err_console.print(Text(f"Could not structure the entry: {outcome.message}", style="red"))
        _print_attempts(outcome)
        raise typer.Exit(int(ExitCode.EXHAUSTED))

    entry = outcome.entry
    if json_output:
        typer.echo(json.dumps(entry.to_dict(), indent=2, ensure_ascii=False))
    elif preview or dry_run:
        _print_entry(entry)

    if dry_run:
        console.print(Text(sink.describe(entry)))
        return

    err_console.print(Text(f"Saving entry: {entry.title}"))
    try:
        result = handoff(entry, sink)
    except PersistFailedError as e:
        err_console.print(Text(str(e), style="red"))
        raise typer.Exit(int(ExitCode.PERSIST_FAILED))

    if result.output:
        console.print(Text(result.output))


def run() -> None:
    app()
