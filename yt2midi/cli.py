"""Command-line interface for yt2midi.

Provides commands for:
- convert: Convert audio files and YouTube videos to MIDI
- info: Show audio file information
"""

import logging
import signal
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

app = typer.Typer(
    name="yt2midi",
    help="Convert audio files and YouTube videos to MIDI",
    rich_markup_mode="markdown",
)
console = Console()

URL_PREFIXES = ("http://", "https://", "http:\\", "https:\\", "www.", "youtube.com", "youtu.be")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _normalize_url(text: str) -> str:
    """Undo Windows path mangling of a URL passed as a path argument."""
    if text.startswith(("http:\\", "https:\\")):
        return text.replace(":\\", "://", 1).replace("\\", "/")
    return text.replace("\\", "/")


def _split_inputs(inputs: List[str]) -> Tuple[List[str], List[Path]]:
    urls, paths = [], []
    for item in inputs:
        if item.startswith(URL_PREFIXES):
            urls.append(_normalize_url(item))
        else:
            paths.append(Path(item))
    return urls, paths


def _build_settings(config: Optional[Path], overrides: Dict[str, Any]):
    from .pipeline import ConversionSettings

    settings = ConversionSettings.from_json_file(config) if config else ConversionSettings()
    for key, value in overrides.items():
        if value is not None:
            setattr(settings, key, value)
    return settings


@app.command()
def convert(
    inputs: Optional[List[str]] = typer.Argument(
        None, help="Audio files and/or YouTube URLs"
    ),
    url: Optional[List[str]] = typer.Option(
        None, "--url", "-u", help="YouTube URL (repeatable)"
    ),
    urls_file: Optional[Path] = typer.Option(
        None, "--urls-file", help="Text file with one YouTube URL per line"
    ),
    output_dir: Path = typer.Option(
        Path("."), "-o", "--output", help="Directory for the MIDI/zip output"
    ),
    start: Optional[float] = typer.Option(
        None, "--start", help="Trim start in seconds"
    ),
    end: Optional[float] = typer.Option(
        None, "--end", help="Trim end in seconds (0 = to end)"
    ),
    max_note_duration: Optional[float] = typer.Option(
        None, "--max-note-duration", help="Drop notes longer than this many seconds"
    ),
    duration_filter: Optional[bool] = typer.Option(
        None, "--duration-filter/--no-duration-filter", help="Apply --max-note-duration"
    ),
    zip_output: Optional[bool] = typer.Option(
        None, "--zip/--no-zip", help="Bundle multiple outputs into one zip"
    ),
    zip_name: Optional[str] = typer.Option(
        None, "--zip-name", help="Name of the zip archive"
    ),
    keep_audio: Optional[bool] = typer.Option(
        None, "--keep-audio/--no-keep-audio", help="Retain the original audio of each source"
    ),
    include_audio: Optional[bool] = typer.Option(
        None, "--include-audio/--no-include-audio", help="Put retained audio into the zip"
    ),
    title: Optional[str] = typer.Option(
        None, "--title", "-t", help="Custom output name"
    ),
    normalize: Optional[bool] = typer.Option(
        None, "--normalize/--no-normalize", help="Peak-normalize audio before transcription"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON settings file (options override it)"
    ),
    device: Optional[str] = typer.Option(
        None, "--device", help="Inference device: cpu or cuda (default: auto)"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
):
    """Convert audio files and YouTube videos to MIDI.

    **Examples:**

        yt2midi convert song.wav

        yt2midi convert a.mp3 b.flac --zip --zip-name piano -o out/

        yt2midi convert "https://youtube.com/watch?v=..." --start 10 --end 40
    """
    from .core import ConversionError
    from .input import YouTubeDownloader
    from .pipeline import (
        BatchJob,
        BatchOrchestrator,
        BatchState,
        EventBus,
        EventKind,
        collect_sources,
    )
    from .transcription import get_default_transcriber

    _setup_logging(verbose)

    try:
        settings = _build_settings(
            config,
            {
                "start_time": start,
                "end_time": end,
                "max_note_duration": max_note_duration,
                "enable_duration_filter": duration_filter,
                "archive_output": zip_output,
                "archive_name": zip_name,
                "keep_original_audio": keep_audio,
                "include_original_in_archive": include_audio,
                "custom_title": title,
                "normalize_audio": normalize,
            },
        ).validate()

        urls, paths = _split_inputs(inputs or [])
        urls.extend(url or [])
        if urls_file is not None:
            urls.extend(YouTubeDownloader.parse_urls(urls_file.read_text(encoding="utf-8")))
        sources = collect_sources(paths=paths, urls=urls)
    except (ConversionError, OSError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not sources:
        console.print("[red]Error: No audio sources provided![/red]")
        raise typer.Exit(1)

    events = EventBus()
    orchestrator = BatchOrchestrator(
        transcriber=get_default_transcriber(device=device),
        events=events,
    )
    job = BatchJob(sources=sources)

    def request_cancel(signum, frame):
        if job.cancel_requested:
            raise KeyboardInterrupt
        job.cancel()
        console.print("[yellow]Cancelling after the current file... (Ctrl+C again to abort)[/yellow]")

    previous_handler = signal.signal(signal.SIGINT, request_cancel)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            disable=json_output,
        ) as progress:
            task = progress.add_task("Converting", total=len(sources))

            def on_event(event):
                if event.kind == EventKind.ITEM_STARTED:
                    progress.update(task, description=event.source_name or "Converting")
                elif event.kind in (EventKind.ITEM_COMPLETED, EventKind.ITEM_FAILED):
                    progress.advance(task)
                if json_output:
                    return
                if event.kind == EventKind.ITEM_FAILED:
                    progress.console.print(f"[red]{escape(event.message)}[/red]")
                elif event.kind == EventKind.ITEM_COMPLETED:
                    progress.console.print(f"[green]{escape(event.message)}[/green]")
                elif event.kind == EventKind.BATCH_FINISHED and event.level >= logging.WARNING:
                    progress.console.print(f"[yellow]{escape(event.message)}[/yellow]")
                elif verbose:
                    progress.console.print(f"  {escape(event.message)}")

            events.subscribe(on_event)
            orchestrator.run(job, settings)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    written: List[Path] = []
    if job.results:
        delivery = orchestrator.deliver(job, settings)
        written = delivery.write_to(output_dir)

    if json_output:
        console.print_json(data=_job_to_dict(job, written))
    else:
        if job.results:
            _show_results_table(job)
            for path in written:
                console.print(f"[blue]Saved:[/blue] {path}")
        if job.state == BatchState.FAILED:
            console.print(f"[red]{escape(job.summary())}[/red]")
        elif job.results:
            console.print(f"[green]{escape(job.summary())}[/green]")
        else:
            console.print(f"[yellow]{escape(job.summary())}[/yellow]")

    if job.state == BatchState.FAILED:
        raise typer.Exit(1)


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
):
    """Show information about an audio file."""
    from .core import DecodeError
    from .input import AudioLoader

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    loader = AudioLoader()
    try:
        buffer = loader.decode(input_file.read_bytes())
    except DecodeError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Duration: {loader.get_duration(buffer):.2f} seconds")
    console.print(f"  Sample rate: {buffer.sample_rate} Hz")
    console.print(f"  Channels: {buffer.channel_count}")
    console.print(f"  Samples: {buffer.frame_count:,}")


def _job_to_dict(job, written: List[Path]) -> Dict[str, Any]:
    """Convert a finished job to a dictionary for JSON output."""
    return {
        "state": job.state.value,
        "total": job.total,
        "results": [
            {
                "output_name": r.output_name,
                "source": r.source_name,
                "notes_count": r.note_count,
                "duration": r.duration,
            }
            for r in job.results
        ],
        "errors": [
            {"source": e.source_name, "kind": e.error_kind, "message": e.message}
            for e in job.errors
        ],
        "failure": job.failure.message if job.failure else None,
        "written": [str(p) for p in written],
    }


def _show_results_table(job):
    """Display converted files in a table."""
    table = Table(title="Converted Files")
    table.add_column("Source", style="cyan")
    table.add_column("Output", style="green")
    table.add_column("Notes", style="yellow")
    table.add_column("Duration (s)", style="magenta")

    for result in job.results:
        table.add_row(
            result.source_name,
            result.output_name,
            str(result.note_count),
            f"{result.duration:.2f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
