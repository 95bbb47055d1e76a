"""
Main CLI interface for habit-voice.

This module provides the Typer-based command-line interface with commands for:
- Extracting an activity from a transcript segment
- Replaying a stream of finalized segments into the day log
- Normalizing names and managing the tracked-activity registry
- Showing a day's logged activities
"""

import json
import os
import sys
from pathlib import Path
from typing import List, Optional

import pyperclip
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.config import ConfigError, config, ensure_project_env, load_project_env, resolve_project_root, validate_config
from .core.extract import ExtractionPipeline
from .core.recorder import ActivityRecorder
from .core.registry import ActivityRegistry, RegistryError, get_project_registry_path, load_builtin_registry, load_registry, save_registry
from .core.session import TranscriptResult, process_stream
from .core.store import DayStore, StoreError, parse_date_string, today_string
from .core.types import ActivityEvent, ExtractionResult, ExtractionTrace

app = typer.Typer(
    name="habit-voice",
    help="Voice habit tracker - turn spoken transcripts into activity log entries",
    no_args_is_help=True,
)
activities_app = typer.Typer(help="Manage tracked activities", no_args_is_help=True)
app.add_typer(activities_app, name="activities")

console = Console()


def _prepare(project_root: Optional[str], debug: bool = False) -> str:
    """Resolve the project root, load its env file and validate settings."""
    root = resolve_project_root(project_root)
    load_project_env(root)
    if debug:
        os.environ["HV_DEBUG"] = "1"
    validate_config()
    return root


def _registry(project_root: str, registry_file: Optional[str]) -> ActivityRegistry:
    return load_registry(project_root, registry_file or config.registry_file)


def _store(project_root: str) -> DayStore:
    return DayStore(project_root, config.data_dir)


def _result_dict(result: Optional[ExtractionResult]) -> Optional[dict]:
    return result.model_dump() if result is not None else None


@app.command()
def parse(
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Transcript segment to parse"),
    file: Optional[str] = typer.Option(None, "--file", help="Path to file containing the transcript segment"),
    registry_file: Optional[str] = typer.Option(None, "--registry", "-r", help="Tracked-activity registry JSON file"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
    output_format: str = typer.Option("rich", "--format", "-f", help="Output format (rich, json)"),
    record: bool = typer.Option(False, "--record/--no-record", help="Record an accepted activity in today's log"),
    explain: bool = typer.Option(False, "--explain", help="Show every candidate the cascade tried"),
    debug: bool = typer.Option(False, "--debug", help="Write JSON extraction traces under .habit_voice/debug"),
):
    """
    Extract an activity from one finalized transcript segment.

    Examples:
        habit-voice parse --text "I did 20 pushups"
        habit-voice parse --text "went for a 30 minute walk" --record
        habit-voice parse --file segment.txt --format json --explain
    """
    try:
        if text and file:
            console.print("[bold red]Error:[/bold red] Cannot specify both --text and --file options")
            sys.exit(1)

        if not text and not file:
            console.print("[bold red]Error:[/bold red] Must specify either --text or --file option")
            sys.exit(1)

        if file:
            file_path = Path(file)
            if not file_path.exists():
                console.print(f"[bold red]Error:[/bold red] File not found: {escape(file)}")
                sys.exit(1)
            text = file_path.read_text(encoding="utf-8").strip()

        assert text is not None, "Text should not be None after validation"

        root = _prepare(project_root, debug)
        registry = _registry(root, registry_file)
        recorder = ActivityRecorder(registry, _store(root), project_root=root) if record else None
        recorded: List[Optional[ActivityEvent]] = []
        pipeline = ExtractionPipeline(registry, _recording_handler(recorder, recorded), root)

        trace = pipeline.explain(text) if explain else None
        result = pipeline.process(text)

        _display_result(result, trace, output_format, recorded[0] is not None if recorded else None)

    except (ConfigError, RegistryError, StoreError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Unexpected Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@app.command()
def listen(
    file: Optional[str] = typer.Option(None, "--file", help="Read segments from a file instead of stdin"),
    registry_file: Optional[str] = typer.Option(None, "--registry", "-r", help="Tracked-activity registry JSON file"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
    record: bool = typer.Option(True, "--record/--no-record", help="Record accepted activities in today's log"),
    debug: bool = typer.Option(False, "--debug", help="Write JSON extraction traces under .habit_voice/debug"),
):
    """
    Replay finalized transcript segments, one per line; a blank line marks silence.

    Examples:
        habit-voice listen --file session.txt
        echo "I did 20 pushups" | habit-voice listen --no-record
    """
    try:
        root = _prepare(project_root, debug)
        registry = _registry(root, registry_file)
        recorder = ActivityRecorder(registry, _store(root), project_root=root) if record else None
        recorded: List[Optional[ActivityEvent]] = []
        pipeline = ExtractionPipeline(registry, _recording_handler(recorder, recorded), root)

        if file:
            lines = Path(file).read_text(encoding="utf-8").splitlines()
        else:
            lines = typer.get_text_stream("stdin").read().splitlines()

        batches = [[TranscriptResult(text=line.strip(), is_final=True)] if line.strip() else [] for line in lines]
        _, results = process_stream(batches, pipeline)

        if not results:
            console.print("[yellow]No activities detected[/yellow]")
            return

        table = Table(title=f"Detected Activities ({len(results)})")
        table.add_column("Activity", style="cyan")
        table.add_column("Quantity", style="white")
        table.add_column("Unit", style="white")
        table.add_column("Phrase", style="dim")
        if record:
            table.add_column("Recorded", style="white")
        for index, result in enumerate(results):
            row = [escape(result.name), result.quantity or "-", escape(result.unit or "-"), escape(result.transcribed_phrase)]
            if record:
                row.append("Yes" if recorded[index] is not None else "[yellow]No[/yellow]")
            table.add_row(*row)
        console.print(table)

    except (ConfigError, RegistryError, StoreError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@app.command()
def normalize(
    name: str = typer.Argument(..., help="Activity name to normalize"),
    registry_file: Optional[str] = typer.Option(None, "--registry", "-r", help="Tracked-activity registry JSON file"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
):
    """
    Show how a spoken name maps onto the tracked-activity registry.

    Examples:
        habit-voice normalize "push ups"
    """
    try:
        root = _prepare(project_root)
        registry = _registry(root, registry_file)

        normalized = registry.normalize(name)
        accepted = registry.is_open_vocabulary() or registry.is_valid_tracked_activity(normalized)

        table = Table(show_header=False, box=None)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Input", escape(name))
        table.add_row("Normalized", escape(normalized))
        table.add_row("Active", "Yes" if registry.is_active(name) else "No")
        table.add_row("Accepted for logging", "Yes" if accepted else "No")
        if registry.is_open_vocabulary():
            table.add_row("Mode", "open vocabulary")
        elif not accepted:
            suggestions = registry.suggest(normalized)
            if suggestions:
                table.add_row("Did you mean", escape(", ".join(suggestions)))
        console.print(table)

    except (ConfigError, RegistryError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@app.command("log")
def show_log(
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Day to show (YYYY-MM-DD, default: today)"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
):
    """
    Show the activities logged on a day.
    """
    try:
        root = _prepare(project_root)
        date_string = date or today_string()
        parse_date_string(date_string)
        events = _store(root).get_events(date_string)

        if not events:
            console.print(f"[yellow]No activities logged on {date_string}[/yellow]")
            return

        table = Table(title=f"Activities on {date_string}")
        table.add_column("Time", style="dim")
        table.add_column("Activity", style="cyan")
        table.add_column("Quantity", style="white")
        table.add_column("Unit", style="white")
        table.add_column("Id", style="dim")
        for event in events:
            table.add_row(event.timestamp.strftime("%H:%M"), escape(event.name), event.quantity or "-", escape(event.unit or "-"), event.id[:8])
        console.print(table)

    except (ConfigError, StoreError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@activities_app.command("list")
def list_activities(
    registry_file: Optional[str] = typer.Option(None, "--registry", "-r", help="Tracked-activity registry JSON file"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
):
    """List tracked activities and their keywords."""
    try:
        root = _prepare(project_root)
        registry = _registry(root, registry_file)

        if not len(registry):
            console.print("[yellow]No tracked activities configured (open vocabulary: every activity is accepted)[/yellow]")
            return

        table = Table(title="Tracked Activities")
        table.add_column("Name", style="cyan")
        table.add_column("Active", style="white")
        table.add_column("Keywords", style="dim")
        for activity in registry:
            table.add_row(escape(activity.name), "Yes" if activity.active else "No", escape(", ".join(activity.keywords)))
        console.print(table)

    except (ConfigError, RegistryError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@activities_app.command("add")
def add_activity(
    name: str = typer.Argument(..., help="Canonical activity name"),
    keywords: Optional[List[str]] = typer.Option(None, "--keyword", "-k", help="Spoken variant (repeatable)"),
    inactive: bool = typer.Option(False, "--inactive", help="Add without enabling detection"),
    registry_file: Optional[str] = typer.Option(None, "--registry", "-r", help="Tracked-activity registry JSON file"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
):
    """
    Track a new activity.

    Examples:
        habit-voice activities add Pullups -k pullup -k "pull ups"
    """
    _edit_registry(project_root, registry_file, lambda registry: registry.add(name, keywords or [], active=not inactive), f"Added {name}")


@activities_app.command("toggle")
def toggle_activity(
    name: str = typer.Argument(..., help="Activity name"),
    active: bool = typer.Option(True, "--on/--off", help="Enable or disable detection"),
    registry_file: Optional[str] = typer.Option(None, "--registry", "-r", help="Tracked-activity registry JSON file"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
):
    """Enable or disable detection of a tracked activity."""
    _edit_registry(project_root, registry_file, lambda registry: registry.set_active(name, active), f"{name} is now {'active' if active else 'inactive'}")


@activities_app.command("keyword")
def add_keyword(
    name: str = typer.Argument(..., help="Activity name"),
    keyword: str = typer.Argument(..., help="Spoken variant to add"),
    registry_file: Optional[str] = typer.Option(None, "--registry", "-r", help="Tracked-activity registry JSON file"),
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
):
    """Add a keyword to a tracked activity."""
    _edit_registry(project_root, registry_file, lambda registry: registry.add_keyword(name, keyword), f"Added keyword '{keyword}' to {name}")


@activities_app.command("init")
def init_activities(
    project_root: Optional[str] = typer.Option(None, "--project-root", help="Project root holding .habit_voice/"),
    force: bool = typer.Option(False, "--force/--no-force", help="Overwrite an existing project registry"),
):
    """Write the default tracked activities and a .env template into .habit_voice/."""
    try:
        root = resolve_project_root(project_root)
        if get_project_registry_path(root).exists() and not force:
            console.print("[yellow]Project registry already exists; use --force to overwrite[/yellow]")
            return
        path = save_registry(ActivityRegistry(load_builtin_registry()), root)
        env_path = ensure_project_env(root)
        console.print(f"[bold green]Wrote default activities to {escape(str(path))}[/bold green]")
        console.print(f"[dim]Project settings: {escape(str(env_path))}[/dim]")

    except (RegistryError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


def _recording_handler(recorder: Optional[ActivityRecorder], recorded: List[Optional[ActivityEvent]]):
    """Detection callback that stores results and notes what the recorder did with each."""
    if recorder is None:
        return None
    return lambda detected: recorded.append(recorder.on_activity_detected(detected))


def _edit_registry(project_root: Optional[str], registry_file: Optional[str], change, message: str) -> None:
    try:
        root = _prepare(project_root)
        target_file = registry_file or config.registry_file
        registry = _registry(root, target_file)
        change(registry)
        path = save_registry(registry, root, target_file)
        console.print(f"[bold green]{escape(message)}[/bold green] [dim]({escape(str(path))})[/dim]")

    except (ConfigError, RegistryError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


def _display_result(
    result: Optional[ExtractionResult], trace: Optional[ExtractionTrace], output_format: str, recorded: Optional[bool] = None
) -> None:
    """
    Display an extraction result in the specified format.

    Args:
        recorded: Whether the result was stored, or None when recording was not requested
    """

    if output_format == "json":
        output = {"result": _result_dict(result)}
        if recorded is not None:
            output["recorded"] = recorded
        if trace is not None:
            output["attempts"] = [step.model_dump() for step in trace.steps]
        json_output = json.dumps(output, indent=2)
        console.print(json_output, markup=False, highlight=False, soft_wrap=True)

        try:
            pyperclip.copy(json.dumps(_result_dict(result), indent=2))
        except pyperclip.PyperclipException:
            # No clipboard available; output was already printed
            pass
        return

    if trace is not None:
        attempts = Table(title="Cascade Attempts")
        attempts.add_column("#", style="dim")
        attempts.add_column("Tier", style="cyan")
        attempts.add_column("Candidate", style="white")
        attempts.add_column("Quantity", style="white")
        attempts.add_column("Unit", style="white")
        attempts.add_column("Admitted", style="white")
        for index, step in enumerate(trace.steps, 1):
            attempts.add_row(
                str(index),
                f"{step.tier}. {step.tier_name}",
                escape(step.candidate.name),
                step.candidate.quantity or "-",
                escape(step.candidate.unit or "-"),
                "[green]yes[/green]" if step.accepted else "[red]no[/red]",
            )
        console.print(attempts)

    if result is None:
        console.print("[yellow]No activity detected[/yellow]")
        return

    summary = Table(show_header=False, box=None)
    summary.add_column("Key", style="cyan")
    summary.add_column("Value", style="white")
    summary.add_row("Activity", escape(result.name))
    summary.add_row("Quantity", result.quantity or "-")
    summary.add_row("Unit", escape(result.unit or "-"))
    console.print(Panel(summary, title="[bold green]Detected Activity[/bold green]", border_style="green"))
    console.print(f"[dim]Transcribed: {escape(result.transcribed_phrase)}[/dim]")
    if recorded is False:
        console.print("[yellow]Not recorded: the name does not match any tracked activity[/yellow]")


if __name__ == "__main__":
    app()
