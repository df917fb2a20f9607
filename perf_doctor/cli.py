"""Entry point for the perf-doctor command line tool."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Tuple

import structlog
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .classification import recommendations
from .config import ProcessCatalog, Settings
from .diagnostics import DiagnosticEngine
from .errors import InvalidSnapshotError, PerfDoctorError
from .formatting import (
    format_diagnosis,
    format_gb,
    format_load,
    format_network,
    format_process_table,
    format_uptime,
    to_json,
)
from .logger import setup_logging
from .models import DiagnosisResult, ProcessRecord, SystemSnapshot
from .system_state import SORT_KEYS, gather_processes, gather_snapshot

logger = structlog.get_logger(__name__)

SEVERITY_STYLES = {"critical": "bold red", "warning": "yellow", "info": "cyan"}


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        settings = Settings()
    except ValueError as exc:
        # pydantic ValidationError and SettingsError both derive from ValueError
        _abort(exc)
    parser = argparse.ArgumentParser(
        description="Find out what is slowing the machine down and how to fix it.",
    )
    parser.add_argument(
        "--top", type=int, default=settings.top_processes, help="number of processes listed by --processes"
    )
    parser.add_argument("--sort-by", choices=SORT_KEYS, default="cpu", help="ranking used by --processes")
    parser.add_argument("--json", action="store_true", help="print the diagnosis as JSON")
    parser.add_argument("--ui", action="store_true", help="render a rich terminal UI")
    parser.add_argument("--detailed", action="store_true", help="include the raw snapshot in the output")
    parser.add_argument("--processes", action="store_true", help="only list the busiest processes with advice")
    parser.add_argument("--input", type=Path, help="diagnose a saved JSON snapshot instead of the live system")
    parser.add_argument("--log-level", default=settings.log_level, help="logging level (default: %(default)s)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        engine = DiagnosticEngine(thresholds=settings.thresholds(), catalog=settings.catalog())
        if args.processes:
            _print_process_analysis(args.sort_by, args.top, engine.catalog)
            return

        if args.input is not None:
            snapshot, processes = load_input(args.input)
        else:
            snapshot = gather_snapshot(io_interval=settings.io_sample_interval)
            # detectors read the list as a CPU ranking whatever --sort-by says
            processes = gather_processes(sort_by="cpu", limit=settings.top_processes, catalog=engine.catalog)
        result = engine.diagnose(snapshot, processes, detailed=args.detailed)
    except (PerfDoctorError, OSError, KeyError, ValueError) as exc:
        logger.error("diagnosis_aborted", error=str(exc))
        _abort(exc)

    if args.json:
        print(to_json(result))
        return

    if args.ui:
        _render_rich(result)
        return

    print(format_diagnosis(result))


def _abort(exc: Exception) -> NoReturn:
    print(f"error: {exc}", file=sys.stderr)
    sys.exit(1)


def _print_process_analysis(sort_by: str, limit: int, catalog: ProcessCatalog) -> None:
    processes = gather_processes(sort_by=sort_by, limit=limit, catalog=catalog)

    print(f"Top {limit} processes by {sort_by}:")
    print(format_process_table(processes))
    advice = recommendations(processes, catalog)
    if advice:
        print("\nRecommendations:")
        for line in advice:
            print(f"- {line}")


def load_input(path: Path) -> Tuple[SystemSnapshot, List[ProcessRecord]]:
    """Read ``{"snapshot": {...}, "processes": [...]}`` from a JSON file.

    Raises:
        InvalidSnapshotError: if a section has the wrong shape, e.g. a list where
            an object is expected.
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    try:
        snapshot = SystemSnapshot.from_dict(payload["snapshot"])
        processes = [ProcessRecord.from_dict(item) for item in payload.get("processes", [])]
    except (TypeError, AttributeError) as exc:
        raise InvalidSnapshotError("input", str(path), f"unexpected structure ({exc})") from exc
    return snapshot, processes


def _render_rich(result: DiagnosisResult) -> None:
    console = Console()

    style = "bold green" if result.health_score >= 80 else "bold yellow" if result.health_score >= 40 else "bold red"
    console.print(
        Panel(
            f"{result.summary}\nHealth score: {result.health_score}/100",
            title=f"Diagnosis - {result.timestamp:%Y-%m-%d %H:%M:%S}",
            style=style,
        )
    )

    if result.snapshot is not None:
        snapshot = result.snapshot
        summary = Table(show_header=False, box=box.ROUNDED)
        summary.add_row("CPU", f"{snapshot.cpu.usage_percent:.0f}%")
        summary.add_row(
            "Memory",
            f"{snapshot.memory.usage_percent:.0f}% | used {format_gb(snapshot.memory.used_gb)}"
            f" / {format_gb(snapshot.memory.total_gb)} | pressure {snapshot.memory.pressure}",
        )
        summary.add_row("Swap", format_gb(snapshot.memory.swap_used_gb))
        summary.add_row(
            "Disk",
            f"{snapshot.disk.usage_percent:.0f}% | free {format_gb(snapshot.disk.available_gb)}"
            f" | I/O {snapshot.disk.io.read_mb_s + snapshot.disk.io.write_mb_s:.1f} MB/s",
        )
        if snapshot.load_avg:
            summary.add_row("Load (1/5/15)", format_load(snapshot.load_avg))
        if snapshot.network is not None:
            summary.add_row("Network", format_network(snapshot.network))
        if snapshot.system is not None:
            summary.add_row(
                "System",
                f"{snapshot.system.hostname} | {snapshot.system.platform} {snapshot.system.arch}"
                f" | up {format_uptime(snapshot.system.uptime_seconds)}",
            )
        console.print(summary)

    if result.issues:
        issues = Table(title="Detected issues", box=box.SIMPLE_HEAD)
        issues.add_column("Severity")
        issues.add_column("Issue", style="bold")
        issues.add_column("Details")
        issues.add_column("Impact")
        for issue in result.issues:
            issues.add_row(
                f"[{SEVERITY_STYLES.get(issue.severity, '')}]{issue.severity}[/]",
                issue.title,
                issue.description,
                issue.impact,
            )
        console.print(issues)
    else:
        console.print(Panel("No obvious bottleneck found.", style="bold green"))

    if result.quick_fixes:
        console.print(Panel("\n".join(f"- {fix}" for fix in result.quick_fixes), title="Quick fixes"))
    if result.long_term_recommendations:
        console.print(
            Panel("\n".join(f"- {fix}" for fix in result.long_term_recommendations), title="Long-term recommendations")
        )

    console.print(_rich_process_table("Top processes", result.top_processes))


def _rich_process_table(title: str, processes: Sequence[ProcessRecord]) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("PID", justify="right")
    table.add_column("Process")
    table.add_column("CPU", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("Impact")

    if not processes:
        table.add_row("-", "No process data", "-", "-", "-")
        return table

    for proc in processes:
        table.add_row(
            str(proc.pid),
            proc.name,
            f"{proc.cpu_percent:.1f}%",
            format_gb(proc.memory_mb / 1024),
            proc.impact_level,
        )
    return table


if __name__ == "__main__":
    main()
