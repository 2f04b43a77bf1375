"""CLI entry point for kidsvid."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .analysis.categorizer import categorize_channel, categorize_videos
from .analysis.pipeline import AnalysisPipeline
from .config import PASSING_THRESHOLD, SETTINGS_FILE, Config
from .loader import load_channels, load_content, load_videos
from .models.video import Finding
from .quality.scorer import score_content

console = Console()

EXIT_ERROR = 1
EXIT_GATE_FAILED = 2


def setup_logging(log_level: str = "WARNING") -> None:
    """Route log records through Rich."""
    logging.root.handlers.clear()
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        handlers=[RichHandler(show_time=False, show_path=False, markup=False, console=console)],
        format="%(message)s",
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/] {escape(message)}")
    sys.exit(EXIT_ERROR)


def _findings_table(findings: List[Finding], show_metadata: bool) -> Table:
    table = Table(title="Patterns", expand=True)
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Scope", style="magenta")
    table.add_column("Conf", justify="right")
    table.add_column("N", justify="right")
    table.add_column("Finding", ratio=1)
    if show_metadata:
        table.add_column("Metadata", style="dim")

    for f in findings:
        row = [
            f.pattern_type,
            str(f.category) if f.category else "all",
            f"{f.confidence:.2f}",
            str(f.sample_size),
            escape(f.finding),
        ]
        if show_metadata:
            row.append(escape(str(f.metadata)))
        table.add_row(*row)
    return table


def _pipeline_event_handler(event_type: str, *args) -> None:
    """Print pipeline progress as dim console lines."""
    match event_type:
        case "start":
            console.print(f"[dim]Analyzing {args[0]} videos...[/dim]")
        case "categorized":
            console.print(f"[dim]  categorized {len(args[0])} videos[/dim]")
        case "patterns_detected":
            console.print(f"[dim]  {len(args[0])} patterns found[/dim]")
        case "engagement_done":
            console.print(f"[dim]  {len(args[1])} channels ranked[/dim]")


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help=f"YAML settings file [default: ./{SETTINGS_FILE} if present].")
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Categorize, mine and quality-gate kids video content."""
    try:
        cfg = Config.load_from_file(config_path) if config_path else Config.load_default()
    except (OSError, ValueError) as e:
        _fail(str(e))
    setup_logging("DEBUG" if verbose else cfg.log_level)
    ctx.obj = cfg


@main.command()
@click.argument("videos_file", type=click.Path(dir_okay=False))
def categorize(videos_file: str) -> None:
    """Categorize every video in VIDEOS_FILE plus a channel-level summary."""
    try:
        videos = load_videos(videos_file)
    except (OSError, ValueError) as e:
        _fail(str(e))

    results = categorize_videos(videos)
    table = Table(title="Categories", expand=True)
    table.add_column("Video", style="dim", no_wrap=True)
    table.add_column("Title", ratio=1)
    table.add_column("Category", style="cyan")
    table.add_column("Conf", justify="right")
    for video in videos:
        result = results[video.video_id]
        table.add_row(video.video_id, escape(video.title), str(result.category), f"{result.confidence:.2f}")
    console.print(table)

    channel = categorize_channel(videos)
    console.print(
        Panel(
            f"[bold]Category:[/]   {channel.category}\n"
            f"[bold]Confidence:[/] {channel.confidence:.2f}",
            title="Channel",
            border_style="cyan",
        )
    )


@main.command()
@click.argument("videos_file", type=click.Path(dir_okay=False))
@click.option("--channels", "channels_file", type=click.Path(dir_okay=False),
              help="Channel id -> name mapping (JSON/YAML).")
@click.pass_obj
def analyze(cfg: Config, videos_file: str, channels_file: str | None) -> None:
    """Run the full analysis pipeline over VIDEOS_FILE."""
    try:
        videos = load_videos(videos_file)
        channels = load_channels(channels_file) if channels_file else {}
    except (OSError, ValueError) as e:
        _fail(str(e))

    pipeline = AnalysisPipeline(cfg, event_callback=_pipeline_event_handler)
    result = pipeline.run(videos, channels)

    if not result.patterns:
        console.print("[yellow]No patterns found.[/yellow]")
    else:
        findings = result.patterns[: cfg.report.max_findings]
        console.print(_findings_table(findings, cfg.report.show_metadata))

    if result.channels:
        table = Table(title="Top Channels", expand=True)
        table.add_column("#", justify="right")
        table.add_column("Channel", ratio=1)
        table.add_column("Category", style="cyan")
        table.add_column("Avg views", justify="right")
        table.add_column("Engagement", justify="right")
        table.add_column("Uploads/wk", justify="right")
        for ch in result.channels[: cfg.report.top_channels]:
            table.add_row(
                str(ch.rank), escape(ch.name), str(ch.primary_category), f"{ch.avg_views:,}",
                f"{ch.engagement_rate * 100:.2f}%", f"{ch.upload_frequency:.1f}",
            )
        console.print(table)

    for outlier in result.outliers:
        console.print(
            f"[bold magenta]Viral:[/] {escape(outlier.video.title)} "
            f"({outlier.viral_multiplier}x avg, {outlier.category})"
        )


@main.command()
@click.argument("script_file", type=click.Path(dir_okay=False))
def score(script_file: str) -> None:
    """Score one generated script in SCRIPT_FILE against the quality gate."""
    try:
        content = load_content(script_file)
    except (OSError, ValueError) as e:
        _fail(str(e))

    result = score_content(content)
    verdict = "[bold green]PASSED[/]" if result.passed else "[bold red]FAILED[/]"
    console.print(
        Panel(
            f"[bold]Educational value:[/]    {result.educational_value}/10\n"
            f"[bold]Engagement potential:[/] {result.engagement_potential}/10\n"
            f"[bold]Threshold:[/]            {PASSING_THRESHOLD}\n"
            f"[bold]Verdict:[/]              {verdict}",
            title=escape(content.title),
            border_style="green" if result.passed else "red",
        )
    )
    for item in result.feedback:
        console.print(f"  [yellow]-[/yellow] {escape(item)}", highlight=False)

    if not result.passed:
        sys.exit(EXIT_GATE_FAILED)


@main.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False), default=SETTINGS_FILE)
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
@click.pass_obj
def init_config(cfg: Config, path: str, force: bool) -> None:
    """Write the active settings to PATH so they can be edited."""
    if Path(path).exists() and not force:
        _fail(f"{path} already exists; pass --force to overwrite it")
    try:
        cfg.save_to_file(path)
    except OSError as e:
        _fail(str(e))
    console.print(f"[green]Settings written to {escape(path)}[/green]")


if __name__ == "__main__":
    main()
