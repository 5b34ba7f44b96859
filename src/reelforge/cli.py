"""CLI entry point for the render template pipeline."""

import json
import logging
import typer
from pathlib import Path
from typing import Any, List, Optional

import yaml

from . import __version__
from .config import config
from .errors import ReelforgeError
from .models import CaptionStructure, ScenePlan, SelectedVideo, ValidationConfig

app = typer.Typer(
    name="reelforge",
    help="Validate and repair AI-generated video plans and render templates",
    no_args_is_help=True
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"reelforge version {__version__}")
        raise typer.Exit()


def _load_document(path: Path) -> Any:
    """Read a JSON or YAML file."""
    with open(path, "r") as f:
        return yaml.safe_load(f)


def _load_videos(path: Optional[Path]) -> List[SelectedVideo]:
    if path is None:
        return []
    data = _load_document(path) or []
    if isinstance(data, dict):
        data = data.get("videos", [])
    return [SelectedVideo(**item) for item in data]


def _write_json(data: Any, output: Optional[Path]) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n")
    typer.echo(f"✅ Saved: {output}")


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """reelforge - Turn AI video plans into render-ready templates."""
    pass


@app.command("check-durations")
def check_durations(
    plan_file: Path = typer.Argument(
        ...,
        help="Scene plan (YAML or JSON)",
        exists=True,
        dir_okay=False
    ),
    videos_file: Optional[Path] = typer.Option(
        None,
        "--videos",
        help="Selected videos with their durations (YAML or JSON)",
        exists=True,
        dir_okay=False
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Report scenes whose narration is too long for their clip."""
    from .pipeline import validate_scene_durations

    setup_logging(verbose)
    try:
        plan = ScenePlan.from_yaml(plan_file)
        videos = _load_videos(videos_file)
    except Exception as e:
        typer.echo(f"❌ Error loading inputs: {e}")
        raise typer.Exit(1)

    violations = validate_scene_durations(plan, videos)
    typer.echo(f"📋 {len(plan.scenes)} scenes checked")

    if not violations:
        typer.echo("✅ Every scene fits its clip")
        return

    for violation in violations:
        typer.echo(
            f"   ⚠️  Scene {violation.scene_index + 1}: "
            f"{violation.text_length_seconds:.1f}s narration, "
            f"{violation.video_length_seconds:.1f}s clip, "
            f"over by {violation.overage_seconds:.2f}s"
        )
    raise typer.Exit(2)


@app.command()
def validate(
    template_file: Path = typer.Argument(
        ...,
        help="Render template (JSON or YAML)",
        exists=True,
        dir_okay=False
    ),
    voice_id: Optional[str] = typer.Option(None, "--voice-id", help="Voice every narration must use"),
    captions: bool = typer.Option(True, "--captions/--no-captions", help="Keep or strip captions"),
    preset: Optional[str] = typer.Option(None, "--preset", help="Caption preset"),
    placement: Optional[str] = typer.Option(None, "--placement", help="Caption placement: top, middle, bottom"),
    color: Optional[str] = typer.Option(None, "--color", help="Caption highlight color"),
    effect: Optional[str] = typer.Option(None, "--effect", help="Caption effect"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (stdout if omitted)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Normalize a template, apply captions and fix voices."""
    from .pipeline import apply_captions, normalize_template, reconcile_voices

    setup_logging(verbose)
    try:
        raw = _load_document(template_file)
    except Exception as e:
        typer.echo(f"❌ Error loading template: {e}")
        raise typer.Exit(1)

    structure = CaptionStructure(
        enabled=captions,
        preset_id=preset,
        placement=placement,
        transcript_color=color,
        transcript_effect=effect,
    )
    try:
        template = normalize_template(raw)
    except ReelforgeError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    template = apply_captions(template, structure)
    template = reconcile_voices(template, voice_id)
    _write_json(template.to_dict(), output)


@app.command("watermark-check")
def watermark_check(
    user_id: str = typer.Argument(..., help="User to check"),
    store: Optional[Path] = typer.Option(None, "--store", help="Plan store YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Show whether a user's videos get the watermark."""
    from .pipeline import WatermarkService
    from .services import YamlPlanStore

    setup_logging(verbose)
    service = WatermarkService(YamlPlanStore(store or config.plan_store_path))
    if service.should_watermark(user_id):
        typer.echo(f"🏷️  {user_id}: watermark")
    else:
        typer.echo(f"💎 {user_id}: no watermark")


@app.command()
def generate(
    script_file: Path = typer.Argument(
        ...,
        help="Narration script (plain text)",
        exists=True,
        dir_okay=False
    ),
    videos_file: Path = typer.Option(
        ...,
        "--videos",
        help="Selected videos with their durations (YAML or JSON)",
        exists=True,
        dir_okay=False
    ),
    user_id: Optional[str] = typer.Option(None, "--user-id", help="Requesting user, gates the watermark"),
    voice_id: Optional[str] = typer.Option(None, "--voice-id", help="Voice every narration must use"),
    language: str = typer.Option("en", "--language", "-l", help="Output language"),
    captions: bool = typer.Option(True, "--captions/--no-captions", help="Render captions"),
    preset: Optional[str] = typer.Option(None, "--preset", help="Caption preset"),
    store: Optional[Path] = typer.Option(None, "--store", help="Plan store YAML file"),
    output: Path = typer.Option(Path("output/template.json"), "--output", "-o", help="Output template path"),
    plan_output: Optional[Path] = typer.Option(None, "--plan-output", help="Also save the final scene plan"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Plan scenes with Claude and produce a render-ready template."""
    from .agents import ScenePlannerAgent
    from .pipeline import TemplateOrchestrator, WatermarkService
    from .services import YamlPlanStore

    setup_logging(verbose)
    typer.echo(f"🎬 Generating template from {script_file}")

    try:
        config.validate_required()
    except ValueError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    try:
        request = ValidationConfig(
            script_text=script_file.read_text(),
            selected_videos=_load_videos(videos_file),
            caption_config=CaptionStructure(enabled=captions, preset_id=preset),
            voice_id=voice_id,
            output_language=language,
            user_id=user_id,
        )
    except Exception as e:
        typer.echo(f"❌ Error loading inputs: {e}")
        raise typer.Exit(1)

    agent = ScenePlannerAgent()
    typer.echo(f"   Using model: {agent.model}")
    orchestrator = TemplateOrchestrator(
        agent,
        watermark_service=WatermarkService(YamlPlanStore(store or config.plan_store_path)),
    )

    try:
        result = orchestrator.run(request)
    except ReelforgeError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    _write_json(result.template.to_dict(), output)
    if plan_output:
        result.plan.to_yaml(plan_output)
        typer.echo(f"✅ Plan saved: {plan_output}")

    typer.echo(f"\n📋 Summary:")
    typer.echo(f"   Scenes: {len(result.plan.scenes)}")
    typer.echo(f"   Repair attempts: {result.repair_attempts}")
    typer.echo(f"   Watermark: {'yes' if result.watermarked else 'no'}")
    for warning in result.warnings:
        typer.echo(f"   ⚠️  {warning}")


if __name__ == "__main__":
    app()
