"""
cadence.cli - Typer CLI entry point.

Score a finished recording and print its coaching report.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cadence import __version__
from cadence.config import (
    CONFIG_FILENAME,
    CadenceConfig,
    create_default_config,
    load_config,
    write_config,
)
from cadence.exceptions import CadenceError, ConfigError, DependencyError
from cadence.logging import configure_logging
from cadence.models import AudioMetrics, CoachTone, Dimension, FeedbackScores, ScenarioCategory
from cadence.pipeline import SessionReport, coach_recording
from cadence.profile import BaselineMetrics
from cadence.transcribe.provider import TranscriptionProvider
from cadence.utils import format_duration, get_score_class

app = typer.Typer(
    name="cadence",
    help="Delivery coaching for rehearsed conversations.\n\n"
    "Scores clarity, pacing, tone and confidence from a recording and "
    "suggests one thing to try on the next take.",
    add_completion=False,
)
console = Console()


def find_config_file() -> Path | None:
    """Find cadence.yaml in the current directory or a parent."""
    current = Path.cwd()
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current / CONFIG_FILENAME
        current = current.parent
    return None


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cadence {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Cadence - delivery coaching for rehearsed conversations."""
    pass


def resolve_config(
    config_path: Path | None,
    scenario: str | None,
    tone: str | None,
    transcribe: bool = False,
) -> CadenceConfig:
    overrides: dict[str, Any] = {"scenario_category": scenario, "coach_tone": tone}
    if transcribe:
        overrides["transcription_enabled"] = True

    config_file = config_path or find_config_file()
    if config_file is not None:
        return load_config(config_file, overrides)

    try:
        return CadenceConfig(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        raise ConfigError(f"Invalid options: {e}") from e


def load_metrics(input_path: Path, interval: float) -> AudioMetrics:
    if input_path.suffix.lower() == ".json":
        from cadence.io import load_audio_metrics

        return load_audio_metrics(input_path)

    from cadence.extract.metering import metrics_from_audio

    return metrics_from_audio(input_path, interval)


def select_provider(
    input_path: Path,
    transcript_path: Path | None,
    config: CadenceConfig,
) -> TranscriptionProvider | None:
    if transcript_path is not None:
        from cadence.io import load_transcript
        from cadence.transcribe.provider import StaticTranscriber

        return StaticTranscriber(load_transcript(transcript_path))

    if not config.transcription_enabled or input_path.suffix.lower() == ".json":
        return None

    from cadence.transcribe.whisper import WhisperTranscriber

    return WhisperTranscriber(
        input_path,
        model=config.whisper_model,
        language=config.whisper_language,
    )


def print_report(report: SessionReport) -> None:
    feedback = report.feedback
    scores = feedback.scores

    table = Table(title=f"Delivery Scores ({report.category.value})")
    table.add_column("Dimension", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right", style="dim")
    delta = report.delta
    if delta is not None:
        table.add_column("Change", justify="right")

    for dimension, score in scores.items():
        style = get_score_class(score)
        weight = feedback.profile.weights.for_dimension(dimension)
        row = [dimension.label, f"[{style}]{score}[/{style}]", f"{weight:.2f}"]
        if delta is not None:
            row.append(delta.formatted(getattr(delta, dimension.value)))
        table.add_row(*row)

    overall_style = get_score_class(feedback.overall)
    overall_row = [
        "[bold]Overall[/bold]",
        f"[bold {overall_style}]{feedback.overall}[/bold {overall_style}]",
        "",
    ]
    if delta is not None:
        overall_row.append(delta.formatted(delta.overall))
    table.add_row(*overall_row)
    console.print(table)

    if delta is not None:
        if delta.has_improvement and not delta.has_decline:
            console.print("[green]Up on your previous session across the board.[/green]")
        elif delta.has_decline and not delta.has_improvement:
            console.print("[yellow]Below your previous session this time.[/yellow]")
        elif delta.has_improvement:
            console.print("[dim]Mixed against your previous session.[/dim]")

    report_data = report.to_dict()
    console.print(f"\n[bold]{scores.tier}[/bold] - {report_data['interpretation']}")
    console.print(
        f"[dim]Duration {format_duration(feedback.analyzed.duration)}, "
        f"{'transcript + audio' if feedback.used_speech_analysis else 'audio only'}[/dim]"
    )

    worked, change = report.plan.notes
    console.print(f"\n[green]What worked:[/green] [bold]{worked.title}[/bold]")
    console.print(f"  {worked.body}")
    console.print(f"[yellow]What to change:[/yellow] [bold]{change.title}[/bold]")
    console.print(f"  {change.body}")

    console.print(f"\n[cyan]Try again:[/cyan] {report.plan.focus.goal}")
    console.print(f"[dim]  {report.plan.focus.reason}[/dim]")

    if feedback.used_speech_analysis:
        console.print("\n[bold]Insights[/bold]")
        for insight in feedback.insights:
            console.print(f"  - {insight}")


@app.command("analyze")
def analyze(
    input_path: Path = typer.Argument(..., help="Metering JSON or audio file"),
    scenario: str | None = typer.Option(
        None,
        "--scenario",
        "-s",
        help="Scenario category: boundaries, career, relationships, or difficult",
    ),
    tone: str | None = typer.Option(
        None, "--tone", "-t", help="Coach tone: gentle, direct, or executive"
    ),
    baseline_path: Path | None = typer.Option(
        None, "--baseline", "-b", help="JSON with recent-session averages"
    ),
    previous_path: Path | None = typer.Option(
        None, "--previous", "-p", help="Earlier report or scores JSON to compare against"
    ),
    transcript_path: Path | None = typer.Option(
        None, "--transcript", help="Transcript (.txt or .json) to analyze alongside audio"
    ),
    transcribe: bool = typer.Option(
        False, "--transcribe", help="Transcribe the audio file on-device with Whisper"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help=f"Path to {CONFIG_FILENAME}"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Score a recording and print two coaching notes and one focus."""
    configure_logging(verbose)

    if not input_path.exists():
        console.print(f"[red]Error: {input_path} not found[/red]")
        raise typer.Exit(1)

    try:
        config = resolve_config(config_path, scenario, tone, transcribe)
        metrics = load_metrics(input_path, config.metering_interval)

        baseline: BaselineMetrics | None = None
        if baseline_path is not None:
            from cadence.io import load_baseline

            baseline = load_baseline(baseline_path)

        previous: FeedbackScores | None = None
        if previous_path is not None:
            from cadence.io import load_previous_scores

            previous = load_previous_scores(previous_path)

        provider = select_provider(input_path, transcript_path, config)
        if transcribe and provider is None and not json_output:
            console.print("[yellow]Warning: --transcribe needs an audio file[/yellow]")
        report = asyncio.run(
            coach_recording(
                metrics,
                baseline=baseline,
                transcription_enabled=provider is not None,
                provider=provider,
                config=config,
                previous=previous,
            )
        )
    except DependencyError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if e.install_hint:
            console.print(f"[dim]  Install with: {e.install_hint}[/dim]")
        raise typer.Exit(1)
    except CadenceError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return

    print_report(report)


@app.command("profile")
def show_profile(
    scenario: str | None = typer.Option(None, "--scenario", "-s", help="Scenario category"),
    tone: str | None = typer.Option(None, "--tone", "-t", help="Coach tone"),
    baseline_path: Path | None = typer.Option(
        None, "--baseline", "-b", help="JSON with recent-session averages"
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help=f"Path to {CONFIG_FILENAME}"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the full profile as JSON"),
) -> None:
    """Show the scoring profile a session would use."""
    try:
        config = resolve_config(config_path, scenario, tone)
        baseline: BaselineMetrics | None = None
        if baseline_path is not None:
            from cadence.io import load_baseline

            baseline = load_baseline(baseline_path)
        profile = config.profile(baseline)
    except (CadenceError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(profile.model_dump(mode="json"), indent=2))
        return

    category = ScenarioCategory(config.scenario_category)
    coach_tone = CoachTone(config.coach_tone)

    table = Table(title=f"Scoring Profile ({category.value}, {coach_tone.value})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for dimension in Dimension:
        weight = profile.weights.for_dimension(dimension)
        table.add_row(f"{dimension.label} weight", f"{weight:.3f}")

    audio = profile.audio
    low, high = audio.pacing_optimal_range
    table.add_row("Optimal pacing", f"{low:.1f}-{high:.1f} segments/min")
    table.add_row(
        "Pacing bounds",
        f"{audio.pacing_too_slow_segments_per_minute:.1f}-"
        f"{audio.pacing_too_fast_segments_per_minute:.1f} segments/min",
    )
    table.add_row("Quiet threshold", f"{audio.average_level_minimum:.3f}")
    table.add_row("Silence cap", f"{audio.silence_ratio_max:.2f}")
    wpm_low, wpm_high = profile.nlp.pacing_optimal_range
    table.add_row("Optimal speech rate", f"{wpm_low:.0f}-{wpm_high:.0f} wpm")
    table.add_row("Base score", str(profile.tuning.base_score))

    console.print(table)
    console.print(f"[dim]{coach_tone.description}[/dim]")


@app.command("init")
def init_config(
    scenario: str = typer.Option("boundaries", "--scenario", "-s", help="Scenario category"),
    tone: str = typer.Option("gentle", "--tone", "-t", help="Coach tone"),
    path: Path = typer.Option(Path("."), "--path", "-d", help="Directory to write the config in"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a starter cadence.yaml."""
    config_file = path / CONFIG_FILENAME
    if config_file.exists() and not force:
        console.print(f"[red]Error: {config_file} already exists (use --force)[/red]")
        raise typer.Exit(1)

    config = create_default_config(scenario, tone)
    try:
        CadenceConfig(**config)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    write_config(config, config_file)
    console.print(f"[green]✓[/green] Wrote {config_file}")
