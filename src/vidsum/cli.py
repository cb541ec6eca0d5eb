"""CLI entry point for vidsum.

Usage:
    vidsum run --config configs/summary.yaml     # Build one summary per directory
    vidsum info --config configs/summary.yaml    # Show what would be processed
    vidsum capture rtsp://host/stream --output-dir captures
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from vidsum.core.errors import ConfigurationError
from vidsum.core.logging import setup_logging

app = typer.Typer(name="vidsum", help="Batch video summaries by frame sampling")
console = Console()

DEFAULT_CONFIG = Path("configs/summary.yaml")


@app.command()
def run(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Summary config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Sample every configured directory into its summary video."""
    setup_logging(log_level)
    from vidsum.core.scheduler import run_from_config_file

    try:
        stats = run_from_config_file(config)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Processing Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Directories processed", str(stats.directories_processed))
    table.add_row("Directories failed", str(stats.directories_failed))
    table.add_row("Frames written", str(stats.frames_written))
    table.add_row("Success rate", f"{stats.success_rate():.2f}%")
    table.add_row("Processing time", f"{stats.processing_time:.1f}s")
    console.print(table)

    if stats.errors:
        console.print("[yellow]Errors encountered:[/yellow]")
        for error in stats.errors:
            console.print(f"  - {error}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Summary config path")) -> None:
    """Show the directories, videos and strategy a run would use."""
    from vidsum.core.job import resolve_strategy_kind
    from vidsum.core.scanner import build_jobs, scan_directories
    from vidsum.core.scheduler import load_config, resolve_num_threads

    try:
        cfg = load_config(config)
        jobs = build_jobs(scan_directories(cfg.input_directories, cfg.video_extensions))
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"Strategy: [green]{resolve_strategy_kind(cfg).value}[/green]  "
        f"interval={cfg.frame_interval}  fps={cfg.output_fps}  "
        f"mode={cfg.processing_mode.value} ({resolve_num_threads(cfg)} workers)"
    )
    table = Table(title=f"Output: {cfg.output_directory}")
    table.add_column("#", style="dim")
    table.add_column("Directory", style="cyan")
    table.add_column("Tag", style="green")
    table.add_column("Videos", style="yellow")
    table.add_column("Output", style="dim")

    for i, job in enumerate(jobs, 1):
        table.add_row(
            str(i),
            str(job.directory_path),
            job.directory_tag,
            str(len(job.video_list)),
            cfg.output_path_for(job.directory_tag).name,
        )
    console.print(table)


@app.command()
def capture(
    url: str = typer.Argument(..., help="Stream URL (rtsp://, http://, file)"),
    output_dir: Path = typer.Option(Path("captures"), help="Directory for segment files"),
    segment_seconds: int = typer.Option(300, help="Length of each segment file"),
    max_restarts: int = typer.Option(None, help="Stop after this many restarts"),
    ffmpeg_binary: str = typer.Option("ffmpeg", help="ffmpeg executable"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Record a live stream into rotating files, restarting on failure."""
    import subprocess

    from vidsum.capture.supervisor import CaptureSupervisor, build_segment_command

    setup_logging(log_level)
    output_dir.mkdir(parents=True, exist_ok=True)
    cmd = build_segment_command(url, output_dir, segment_seconds, ffmpeg_binary)
    console.print(f"[green]Recording {url} -> {output_dir}[/green]")

    supervisor = CaptureSupervisor(lambda: subprocess.Popen(cmd, stdout=subprocess.DEVNULL))
    supervisor.run(max_restarts=max_restarts)


if __name__ == "__main__":
    app()
