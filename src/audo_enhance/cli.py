"""CLI interface for Audo_Enhance."""

import json
import logging
from pathlib import Path

import typer

from .domain.errors import EnhancementError
from .domain.models import JobStatus
from .enhancement_options import EnhancementType, Focus, MasterProfile
from .interfaces.cli_handlers import analyze_local_file, describe_render_plan, enhance_from_source
from .request_validation import RequestValidationError

app = typer.Typer(help="Audo_Enhance command line interface")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Adaptive enhancement of audio tracks through ffmpeg."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("enhance")
def enhance_command(
    source: str = typer.Argument(..., help="Local path or http(s) URL of the input audio."),
    output: Path = typer.Option(..., "--output", "-o", help="Path to write the enhanced WAV."),
    enhancement_type: EnhancementType = typer.Option(
        EnhancementType.MASTER,
        "--type",
        "-t",
        case_sensitive=False,
        help="Enhancement mode: mix, master or 4d.",
    ),
    speed_multiplier: float = typer.Option(1.0, "--speed", help="Playback speed multiplier (0.5-2.0)."),
    pitch_semitones: float = typer.Option(0.0, "--pitch", help="Pitch shift in semitones (-4 to 4)."),
    focus: Focus = typer.Option(Focus.NONE, "--focus", case_sensitive=False, help="Optional tonal focus."),
    master_profile: MasterProfile = typer.Option(
        MasterProfile.STREAMING,
        "--profile",
        case_sensitive=False,
        help="Loudness profile for master renders.",
    ),
    report_json: Path | None = typer.Option(
        None,
        "--report-json",
        help="Optional path to write the job snapshot (analysis, plan, metrics) as JSON.",
    ),
    timeout_seconds: float | None = typer.Option(None, "--timeout", min=0.0, help="Give up after this many seconds."),
) -> None:
    """Enhance one file end to end."""

    try:
        snapshot = enhance_from_source(
            source,
            output,
            enhancement_type,
            speed_multiplier=speed_multiplier,
            pitch_semitones=pitch_semitones,
            focus=focus,
            master_profile=master_profile,
            report_json=report_json,
            timeout_seconds=timeout_seconds,
        )
    except RequestValidationError as error:
        raise typer.BadParameter(error.message, param_hint=error.parameter) from error
    except EnhancementError as error:
        typer.echo(f"Enhancement failed: {error}", err=True)
        raise typer.Exit(code=1) from error

    if snapshot.status is not JobStatus.DONE:
        typer.echo(f"Enhancement failed: {snapshot.error}", err=True)
        raise typer.Exit(code=1)

    tags = snapshot.analysis.to_dict()["tags"] if snapshot.analysis is not None else []
    typer.echo(f"Enhanced audio written to: {output}")
    typer.echo(f"Job ID: {snapshot.job_id}")
    typer.echo(f"Tags: {', '.join(tags) or 'none'}")


@app.command("analyze")
def analyze_command(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local audio file to analyze."),
) -> None:
    """Print the spectral profile and tone tags of a file."""

    try:
        result = analyze_local_file(source)
    except EnhancementError as error:
        typer.echo(f"Analysis failed: {error}", err=True)
        raise typer.Exit(code=1) from error
    typer.echo(json.dumps(result.to_dict(), indent=2))


@app.command("plan")
def plan_command(
    tags: list[str] = typer.Option([], "--tag", help="Tone tag to plan for; repeatable."),
    enhancement_type: EnhancementType = typer.Option(
        EnhancementType.MASTER, "--type", "-t", case_sensitive=False, help="Enhancement mode."
    ),
    speed_multiplier: float = typer.Option(1.0, "--speed", help="Playback speed multiplier."),
    pitch_semitones: float = typer.Option(0.0, "--pitch", help="Pitch shift in semitones."),
    focus: Focus = typer.Option(Focus.NONE, "--focus", case_sensitive=False, help="Optional tonal focus."),
    master_profile: MasterProfile = typer.Option(
        MasterProfile.STREAMING, "--profile", case_sensitive=False, help="Loudness profile for master renders."
    ),
) -> None:
    """Print the render plan and filtergraph for the given tags and options."""

    try:
        plan = describe_render_plan(
            tags,
            enhancement_type,
            focus=focus,
            speed_multiplier=speed_multiplier,
            pitch_semitones=pitch_semitones,
            master_profile=master_profile,
        )
    except ValueError as error:
        raise typer.BadParameter(str(error), param_hint="--tag") from error
    typer.echo(json.dumps(plan.to_dict(), indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
