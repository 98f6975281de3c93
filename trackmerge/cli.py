"""Command-line interface for trackmerge.

Reads GPX/TCX files from disk and drives the same core used by the HTTP API:
summaries, heart-rate merge to GPX, and per-second comparison export.
"""

import csv
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from trackmerge.analysis.aligner import AlignedSample
from trackmerge.analysis.smoothing import check_window_size
from trackmerge.config.settings import settings
from trackmerge.core.errors import ComparisonTooLongError, SlotNotLoadedError
from trackmerge.core.logger import setup_logger
from trackmerge.models.activity import ActivitySummary
from trackmerge.utils.formatting import format_pace, format_time_axis, parse_pace_range
from trackmerge.workspace.slots import ActivitySlot, ComparisonWorkspace, SlotName

console = Console()

app = typer.Typer(
    name="trackmerge",
    help="Merge heart rate between GPX/TCX recordings and compare them side by side",
    add_completion=False,
)

DEFAULT_HOST = "127.0.0.1"

COMPARE_CSV_FIELDS = ["timestamp", "offset_seconds", "elapsed", "hr_a", "hr_b", "pace_a", "pace_b"]


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level"),
) -> None:
    setup_logger(settings, level=log_level)


def _error_panel(title: str, detail: str) -> Panel:
    return Panel(Text(title, style="bold red"), subtitle=Text(detail), border_style="red")


def _read_text(path: Path) -> str:
    """Read an activity file as UTF-8, exiting with a red panel if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        console.print(_error_panel(f"Failed to load {path.name}", "File is not valid UTF-8 text"))
        raise typer.Exit(1) from e
    except OSError as e:
        console.print(_error_panel(f"Failed to load {path.name}", str(e)))
        raise typer.Exit(1) from e


def _load_slot(
    workspace: ComparisonWorkspace,
    name: SlotName,
    path: Path,
    label: Optional[str] = None,
) -> ActivitySlot:
    slot = workspace.load(name, _read_text(path), path.name)
    if slot.error is not None:
        console.print(_error_panel(f"Failed to load {path.name}", f"[{slot.error_code}] {slot.error}"))
    elif label is not None:
        workspace.set_label(name, label)
    return slot


def _summary_table(summaries: list[ActivitySummary]) -> Table:
    table = Table(title="Activity Summary")
    table.add_column("Label", style="cyan")
    table.add_column("Name")
    table.add_column("Points", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Avg HR", justify="right")
    table.add_column("Avg Pace", justify="right")
    table.add_column("Avg Cadence", justify="right")

    for summary in summaries:
        table.add_row(
            summary.label,
            summary.name,
            str(summary.point_count),
            summary.distance,
            summary.duration,
            summary.avg_heart_rate,
            summary.avg_pace,
            summary.avg_cadence,
        )
    return table


@app.command()
def summary(
    file_a: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="GPX or TCX file"),
    file_b: Optional[Path] = typer.Argument(None, exists=True, dir_okay=False, readable=True, help="Optional second file"),
) -> None:
    """Print distance, duration, heart rate, pace and cadence for one or two files."""
    workspace = ComparisonWorkspace()
    slots = [_load_slot(workspace, SlotName.A, file_a)]
    if file_b is not None:
        slots.append(_load_slot(workspace, SlotName.B, file_b))

    if any(slot.error is not None for slot in slots):
        raise typer.Exit(1)

    summaries = [s for s in workspace.summaries().values() if s is not None]
    console.print(_summary_table(summaries))


@app.command()
def merge(
    file_a: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File loaded into slot A"),
    file_b: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File loaded into slot B"),
    base: SlotName = typer.Option(SlotName.A, "--base", "-b", help="Slot providing track, elevation and time"),
    hr_source: SlotName = typer.Option(SlotName.B, "--hr-source", help="Slot providing heart rate"),
    output: Path = typer.Option(Path(settings.merged_file_name), "--output", "-o", help="Output GPX path"),
    label_a: Optional[str] = typer.Option(None, "--label-a", help="Label for slot A (default: device name)"),
    label_b: Optional[str] = typer.Option(None, "--label-b", help="Label for slot B (default: device name)"),
) -> None:
    """Merge heart rate from one file into the other's track and write GPX."""
    workspace = ComparisonWorkspace()
    slot_a = _load_slot(workspace, SlotName.A, file_a, label_a)
    slot_b = _load_slot(workspace, SlotName.B, file_b, label_b)
    if slot_a.error is not None or slot_b.error is not None:
        raise typer.Exit(1)

    try:
        gpx_text = workspace.export_merged(base, hr_source)
    except SlotNotLoadedError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(gpx_text, encoding="utf-8")
    logger.info(f"Wrote merged GPX to {output}")

    console.print(
        Panel(
            Text(
                f"Merged activity written\nTrack: {workspace[base].merge_label}\n"
                f"Heart rate: {workspace[hr_source].merge_label}",
                style="bold green",
            ),
            subtitle=Text(str(output)),
            border_style="green",
        )
    )


def _write_samples_csv(samples: list[AlignedSample], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as output:
        writer = csv.DictWriter(output, fieldnames=COMPARE_CSV_FIELDS)
        writer.writeheader()
        for sample in samples:
            writer.writerow({
                "timestamp": sample.timestamp.isoformat(),
                "offset_seconds": sample.offset_seconds,
                "elapsed": format_time_axis(sample.offset_seconds),
                "hr_a": "" if sample.hr_a is None else sample.hr_a,
                "hr_b": "" if sample.hr_b is None else sample.hr_b,
                "pace_a": "" if sample.pace_a is None else f"{sample.pace_a:.2f}",
                "pace_b": "" if sample.pace_b is None else f"{sample.pace_b:.2f}",
            })


@app.command()
def compare(
    file_a: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="File loaded into slot A"),
    file_b: Optional[Path] = typer.Argument(None, exists=True, dir_okay=False, readable=True, help="File loaded into slot B"),
    window: int = typer.Option(settings.default_smoothing_window, "--window", "-w", help="Pace smoothing window (odd)"),
    label_a: Optional[str] = typer.Option(None, "--label-a", help="Label for slot A (default: device name)"),
    label_b: Optional[str] = typer.Option(None, "--label-b", help="Label for slot B (default: device name)"),
    pace_range: Optional[str] = typer.Option(None, "--pace-range", help="Keep pace within slowest..fastest, e.g. 9:00..3:00"),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Write the per-second series to this CSV file"),
) -> None:
    """Align two files per second and report heart-rate and pace coverage."""
    try:
        check_window_size(window)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--window") from e

    pace_bounds = None
    if pace_range is not None:
        pace_bounds = parse_pace_range(pace_range)
        if pace_bounds is None:
            raise typer.BadParameter("expected slowest..fastest, e.g. 9:00..3:00", param_hint="--pace-range")

    workspace = ComparisonWorkspace()
    slots = [_load_slot(workspace, SlotName.A, file_a, label_a)]
    if file_b is not None:
        slots.append(_load_slot(workspace, SlotName.B, file_b, label_b))
    if any(slot.error is not None for slot in slots):
        raise typer.Exit(1)

    try:
        samples = workspace.compare(window, max_seconds=settings.max_compare_seconds, pace_range=pace_bounds)
    except ComparisonTooLongError as e:
        console.print(_error_panel("Comparison refused", str(e)))
        raise typer.Exit(1) from e

    summaries = [s for s in workspace.summaries().values() if s is not None]
    console.print(_summary_table(summaries))

    table = Table(title=f"Per-second comparison ({len(samples)} seconds, window {window})")
    table.add_column("Series", style="cyan")
    table.add_column("Samples", justify="right")
    table.add_column("Mean", justify="right")
    for label, values, formatter in (
        (f"HR {workspace[SlotName.A].chart_label}", [s.hr_a for s in samples], lambda v: f"{round(v)} bpm"),
        (f"HR {workspace[SlotName.B].chart_label}", [s.hr_b for s in samples], lambda v: f"{round(v)} bpm"),
        (f"Pace {workspace[SlotName.A].chart_label}", [s.pace_a for s in samples], lambda v: f"{format_pace(v)} /km"),
        (f"Pace {workspace[SlotName.B].chart_label}", [s.pace_b for s in samples], lambda v: f"{format_pace(v)} /km"),
    ):
        present = [v for v in values if v is not None]
        mean = formatter(sum(present) / len(present)) if present else "N/A"
        table.add_row(label, str(len(present)), mean)
    console.print(table)

    if csv_path is not None:
        _write_samples_csv(samples, csv_path)
        console.print(f"[green]Wrote {len(samples)} rows to {csv_path}[/green]")


@app.command()
def server(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the FastAPI server."""
    logger.info(f"Starting FastAPI server on {host}:{port} (reload={reload})")
    uvicorn.run("trackmerge.main:app", host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    app()
