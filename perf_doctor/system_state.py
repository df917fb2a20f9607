"""Collect a system snapshot and a classified process list with psutil."""

from __future__ import annotations

import mmap
import os
import platform
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import psutil
import structlog

from .classification import classify
from .config import DEFAULT_CATALOG, ProcessCatalog
from .models import (
    CpuState,
    DiskIO,
    DiskState,
    MemoryState,
    NetworkState,
    ProcessRecord,
    SystemInfo,
    SystemSnapshot,
)

logger = structlog.get_logger(__name__)

GB = 1024**3
MB = 1024**2
SORT_KEYS = ("cpu", "memory", "name")


def gather_snapshot(io_interval: float = 0.5, disk_path: str = "/") -> SystemSnapshot:
    """Collect a snapshot of the current system health.

    Blocks for roughly ``io_interval`` seconds plus a short CPU sampling window.
    Disk and network rates share the same sampling window.
    """
    cpu_percent = psutil.cpu_percent(interval=0.3)

    disk_before = psutil.disk_io_counters()
    net_before = psutil.net_io_counters(pernic=True)
    time.sleep(io_interval)
    disk_after = psutil.disk_io_counters()
    net_after = psutil.net_io_counters(pernic=True)

    snapshot = SystemSnapshot(
        timestamp=datetime.now(),
        cpu=CpuState(usage_percent=round(cpu_percent, 1), temperature_celsius=_cpu_temperature()),
        memory=_memory_state(),
        disk=_disk_state(disk_path, disk_before, disk_after, io_interval),
        network=_network_state(net_before, net_after, io_interval),
        load_avg=_load_average(),
        system=_system_info(),
    )
    logger.debug(
        "snapshot_collected",
        cpu=snapshot.cpu.usage_percent,
        memory=snapshot.memory.usage_percent,
        disk=snapshot.disk.usage_percent,
        interface=snapshot.network.interface,
    )
    return snapshot


def gather_processes(
    sort_by: str = "cpu", limit: int = 15, catalog: ProcessCatalog = DEFAULT_CATALOG
) -> List[ProcessRecord]:
    """Return the busiest processes, classified and ranked by ``sort_by``."""
    if sort_by not in SORT_KEYS:
        raise ValueError(f"sort_by must be one of {', '.join(SORT_KEYS)}, got {sort_by!r}")

    processes = list(psutil.process_iter())
    _prime_cpu_percent(processes)
    records = [
        record for record in _process_records(processes, catalog) if record.cpu_percent > 0 or record.memory_mb > 0
    ]

    if sort_by == "memory":
        records.sort(key=lambda record: record.memory_mb, reverse=True)
    elif sort_by == "name":
        records.sort(key=lambda record: record.name.lower())
    else:
        records.sort(key=lambda record: record.cpu_percent, reverse=True)
    return records[:limit]


def _cpu_temperature() -> Optional[float]:
    sensors = getattr(psutil, "sensors_temperatures", None)
    if sensors is None:
        return None
    try:
        readings = sensors()
    except (OSError, RuntimeError):
        return None
    for label in ("coretemp", "k10temp", "cpu_thermal", "cpu-thermal"):
        if readings.get(label):
            return round(readings[label][0].current, 1)
    for entries in readings.values():
        if entries:
            return round(entries[0].current, 1)
    return None


def _memory_state() -> MemoryState:
    memory = psutil.virtual_memory()
    swap = psutil.swap_memory()

    # macOS exposes wired/active pages; other platforms fall back to used memory
    wired_gb = getattr(memory, "wired", 0) / GB
    app_gb = getattr(memory, "active", memory.used) / GB
    compressed_gb = 0.0
    # free leaves out reclaimable cache where wired pages are not reported
    free_gb = (memory.free if hasattr(memory, "wired") else memory.available) / GB

    return MemoryState(
        usage_percent=memory.percent,
        used_gb=_round(memory.used / GB),
        total_gb=_round(memory.total / GB),
        real_available_gb=_round(memory.available / GB),
        pressure=_memory_pressure(memory.percent, swap.used),
        app_memory_gb=_round(app_gb),
        wired_memory_gb=_round(wired_gb),
        compressed_memory_gb=compressed_gb,
        swap_used_gb=_round(swap.used / GB),
        swap_pages_out=int(swap.sout // mmap.PAGESIZE),
        memory_efficiency=_memory_efficiency(free_gb, compressed_gb),
        compression_ratio=None,
    )


def _memory_pressure(usage_percent: float, swap_used_bytes: int) -> str:
    if usage_percent > 95 or swap_used_bytes > 2 * GB:
        return "critical"
    if usage_percent > 85 or swap_used_bytes > 1 * GB:
        return "warning"
    return "normal"


def _memory_efficiency(free_gb: float, compressed_gb: float) -> str:
    if free_gb > 2:
        return "excellent"
    if free_gb > 1 and compressed_gb > 0.5:
        return "good"
    if free_gb > 0.5:
        return "fair"
    return "poor"


def _disk_state(path: str, before: Any, after: Any, io_interval: float) -> DiskState:
    usage = psutil.disk_usage(path)

    if before is None or after is None or io_interval <= 0:
        io = DiskIO(read_mb_s=0.0, write_mb_s=0.0)
    else:
        io = DiskIO(
            read_mb_s=_round(max(0, after.read_bytes - before.read_bytes) / MB / io_interval),
            write_mb_s=_round(max(0, after.write_bytes - before.write_bytes) / MB / io_interval),
        )

    return DiskState(
        usage_percent=usage.percent,
        available_gb=_round(usage.free / GB),
        total_gb=_round(usage.total / GB),
        io=io,
    )


def _network_state(before: Dict[str, Any], after: Dict[str, Any], io_interval: float) -> NetworkState:
    """Rates and totals of the first non-loopback interface that has received data."""
    interface = _active_interface(after)
    if interface is None:
        return NetworkState(
            interface="Unknown", upload_mb_s=0.0, download_mb_s=0.0, total_sent_gb=0.0, total_received_gb=0.0
        )

    counters = after[interface]
    previous = before.get(interface)
    if previous is None or io_interval <= 0:
        upload = download = 0.0
    else:
        upload = max(0, counters.bytes_sent - previous.bytes_sent) / MB / io_interval
        download = max(0, counters.bytes_recv - previous.bytes_recv) / MB / io_interval

    return NetworkState(
        interface=interface,
        upload_mb_s=round(upload, 2),
        download_mb_s=round(download, 2),
        total_sent_gb=_round(counters.bytes_sent / GB),
        total_received_gb=_round(counters.bytes_recv / GB),
    )


def _active_interface(counters: Dict[str, Any]) -> Optional[str]:
    for name, stats in counters.items():
        if not name.startswith("lo") and stats.bytes_recv > 0:
            return name
    return next(iter(counters), None)


def _load_average() -> Optional[Tuple[float, float, float]]:
    if not hasattr(os, "getloadavg"):
        return None
    try:
        return tuple(round(value, 2) for value in os.getloadavg())
    except OSError:
        return None


def _system_info() -> SystemInfo:
    return SystemInfo(
        platform=platform.system(),
        arch=platform.machine(),
        hostname=platform.node(),
        uptime_seconds=round(max(0.0, time.time() - psutil.boot_time())),
    )


def _prime_cpu_percent(processes: Iterable[psutil.Process]) -> None:
    for proc in processes:
        try:
            proc.cpu_percent(None)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    time.sleep(0.1)


def _process_records(processes: Iterable[psutil.Process], catalog: ProcessCatalog) -> List[ProcessRecord]:
    records: List[ProcessRecord] = []
    for proc in processes:
        try:
            with proc.oneshot():
                cpu = proc.cpu_percent(None)
                memory_mb = proc.memory_info().rss / MB
                name = proc.name()
                try:
                    user = proc.username()
                except (KeyError, psutil.AccessDenied):
                    # uid without a passwd entry, or not permitted to look it up
                    user = None
                records.append(classify(proc.pid, name, cpu, memory_mb, user=user, catalog=catalog))
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return records


def _round(value: float) -> float:
    return round(value, 1)
