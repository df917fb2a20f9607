"""Console-friendly formatting utilities."""

from __future__ import annotations

import json
from typing import Iterable, Sequence, Tuple

from .models import DiagnosisResult, NetworkState, ProcessRecord, SystemSnapshot

SEVERITY_MARKERS = {"critical": "[!!]", "warning": "[!]", "info": "[i]"}


def format_gb(value: float) -> str:
    return f"{value:.1f} GB"


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    lines = []
    lines.append(_format_row(headers, widths))
    lines.append(_format_row(["-" * w for w in widths], widths))
    for row in rows:
        lines.append(_format_row(row, widths))
    return "\n".join(lines)


def format_process_table(processes: Iterable[ProcessRecord]) -> str:
    rows = [
        [
            str(proc.pid),
            proc.name,
            f"{proc.cpu_percent:.1f}%",
            format_gb(proc.memory_mb / 1024),
            proc.impact_level,
            "yes" if proc.safe_to_kill else "no",
        ]
        for proc in processes
    ]
    return render_table(["PID", "Process", "CPU", "Memory", "Impact", "Killable"], rows) if rows else "No process data"


def format_uptime(seconds: float) -> str:
    if not seconds:
        return "unknown"
    seconds = int(seconds)
    days, rest = divmod(seconds, 24 * 3600)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_load(load_avg: Tuple[float, float, float]) -> str:
    return " / ".join(f"{value:.2f}" for value in load_avg)


def format_snapshot(snapshot: SystemSnapshot) -> str:
    cpu = snapshot.cpu
    memory = snapshot.memory
    disk = snapshot.disk
    temperature = f" | {cpu.temperature_celsius:.0f}°C" if cpu.temperature_celsius is not None else ""
    load = f" | load (1/5/15) {format_load(snapshot.load_avg)}" if snapshot.load_avg else ""
    lines = [
        f"Time: {snapshot.timestamp:%Y-%m-%d %H:%M:%S}",
        f"CPU: {cpu.usage_percent:.0f}%{temperature}{load}",
        f"Memory: {memory.usage_percent:.0f}% | used {format_gb(memory.used_gb)} / {format_gb(memory.total_gb)}"
        f" | available {format_gb(memory.real_available_gb)} | pressure {memory.pressure}",
        f"Swap: {format_gb(memory.swap_used_gb)} | efficiency {memory.memory_efficiency}",
        f"Disk: {disk.usage_percent:.0f}% | free {format_gb(disk.available_gb)} / {format_gb(disk.total_gb)}"
        f" | I/O read {disk.io.read_mb_s:.1f} MB/s, write {disk.io.write_mb_s:.1f} MB/s",
    ]
    if snapshot.network is not None:
        lines.append(f"Network: {format_network(snapshot.network)}")
    if snapshot.system is not None:
        system = snapshot.system
        lines.append(
            f"System: {system.hostname} | {system.platform} {system.arch} | up {format_uptime(system.uptime_seconds)}"
        )
    return "\n".join(lines)


def format_network(network: NetworkState) -> str:
    text = network.interface
    if network.upload_mb_s > 0 or network.download_mb_s > 0:
        text += f" | up {network.upload_mb_s:.2f} MB/s, down {network.download_mb_s:.2f} MB/s"
    return text + f" | sent {format_gb(network.total_sent_gb)}, received {format_gb(network.total_received_gb)}"


def format_diagnosis(result: DiagnosisResult) -> str:
    lines = [
        f"Health score: {result.health_score}/100",
        result.summary,
    ]
    if result.snapshot is not None:
        lines.append("")
        lines.append(format_snapshot(result.snapshot))

    if result.issues:
        lines.append("")
        lines.append("Detected issues:")
        rows = [
            [SEVERITY_MARKERS.get(issue.severity, issue.severity), issue.title, issue.description, issue.impact]
            for issue in result.issues
        ]
        lines.append(render_table(["", "Issue", "Details", "Impact"], rows))
    else:
        lines.append("")
        lines.append("No obvious bottleneck found.")

    if result.quick_fixes:
        lines.append("")
        lines.append("Quick fixes:")
        lines.extend(f"- {fix}" for fix in result.quick_fixes)
    if result.long_term_recommendations:
        lines.append("")
        lines.append("Long-term recommendations:")
        lines.extend(f"- {fix}" for fix in result.long_term_recommendations)

    if result.top_processes:
        lines.append("")
        lines.append("Top processes:")
        lines.append(format_process_table(result.top_processes))
    return "\n".join(lines)


def to_json(result: DiagnosisResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


def _format_row(row: Sequence[str], widths: Sequence[int]) -> str:
    padded = [cell.ljust(width) for cell, width in zip(row, widths)]
    return " | ".join(padded)
