"""Threshold-driven detectors that turn one slice of a snapshot into issues.

Each detector is independent of the others and of the order in which it runs.
Thresholds and process catalogs are fixed at construction so that a detector can
be exercised in isolation with custom values.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from . import remedies
from .config import DEFAULT_CATALOG, DEFAULT_THRESHOLDS, ProcessCatalog, Thresholds
from .models import (
    BrowserOverloadDetails,
    CpuState,
    CpuTemperatureDetails,
    CpuUsageDetails,
    DevelopmentProcessDetails,
    DiskIODetails,
    DiskSpaceDetails,
    DiskState,
    Issue,
    MemoryDetails,
    MemoryEfficiencyDetails,
    MemoryState,
    ProcessRecord,
    SwapDetails,
)

CPU_CRITICAL_PROCESS_FLOOR = 10
CPU_WARNING_PROCESS_FLOOR = 5
CPU_TOP_PROCESSES = 3

MEMORY_CRITICAL_AVAILABLE_GB = 0.5
MEMORY_WARNING_AVAILABLE_GB = 1.5
MEMORY_PROCESS_FLOOR_MB = 100
SWAP_CRITICAL_GB = 3
SWAP_WARNING_GB = 1

DISK_IO_LIMIT_MB_S = 100

BROWSER_CPU_FLOOR = 5
BROWSER_PROCESS_LIMIT = 5
DEVELOPMENT_CPU_FLOOR = 10


class CpuDetector:
    def __init__(self, thresholds: Thresholds = DEFAULT_THRESHOLDS, catalog: ProcessCatalog = DEFAULT_CATALOG):
        self.thresholds = thresholds
        self.catalog = catalog

    def detect(self, cpu: CpuState, processes: Sequence[ProcessRecord]) -> List[Issue]:
        """Return at most one usage issue plus an independent temperature issue."""
        issues: List[Issue] = []
        limits = self.thresholds.cpu

        if cpu.usage_percent > limits.critical:
            offenders = _busy_processes(processes, CPU_CRITICAL_PROCESS_FLOOR)
            issues.append(
                Issue(
                    type="cpu_critical",
                    severity="critical",
                    title="CPU usage is at a critical level",
                    description=f"CPU usage has reached {cpu.usage_percent:g}%",
                    details=CpuUsageDetails(
                        current_usage=cpu.usage_percent,
                        threshold=limits.critical,
                        top_processes=offenders,
                    ),
                    impact="The whole system is running very slowly",
                    quick_fixes=tuple(remedies.cpu_quick_fixes(offenders, self.catalog)),
                    long_term_fixes=remedies.CPU_CRITICAL_LONG_TERM,
                )
            )
        elif cpu.usage_percent > limits.warning:
            offenders = _busy_processes(processes, CPU_WARNING_PROCESS_FLOOR)
            issues.append(
                Issue(
                    type="cpu_warning",
                    severity="warning",
                    title="CPU usage is high",
                    description=f"CPU usage is {cpu.usage_percent:g}%",
                    details=CpuUsageDetails(
                        current_usage=cpu.usage_percent,
                        threshold=limits.warning,
                        top_processes=offenders,
                    ),
                    impact="The system may respond slowly",
                    quick_fixes=tuple(remedies.cpu_quick_fixes(offenders, self.catalog)),
                    long_term_fixes=remedies.CPU_WARNING_LONG_TERM,
                )
            )

        temperature = cpu.temperature_celsius
        heat = self.thresholds.temperature
        if temperature is not None and temperature > heat.warning:
            issues.append(
                Issue(
                    type="cpu_temperature",
                    severity="critical" if temperature > heat.critical else "warning",
                    title="CPU temperature is high",
                    description=f"CPU temperature is {temperature:g}°C",
                    details=CpuTemperatureDetails(current_temp=temperature, threshold=heat.warning),
                    impact="Performance may be throttled or the machine may shut down",
                    quick_fixes=remedies.CPU_TEMPERATURE_QUICK,
                    long_term_fixes=remedies.CPU_TEMPERATURE_LONG_TERM,
                )
            )
        return issues


class MemoryDetector:
    """Three independent tiers: overall pressure, swap usage and memory efficiency."""

    def __init__(self, thresholds: Thresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    def detect(self, memory: MemoryState, processes: Sequence[ProcessRecord]) -> List[Issue]:
        issues: List[Issue] = []
        pressure_issue = self._pressure_issue(memory, processes)
        if pressure_issue is not None:
            issues.append(pressure_issue)
        swap_issue = self._swap_issue(memory)
        if swap_issue is not None:
            issues.append(swap_issue)
        if memory.memory_efficiency == "poor":
            issues.append(
                Issue(
                    type="memory_efficiency",
                    severity="warning",
                    title="Memory is being used inefficiently",
                    description=(
                        f"Memory efficiency: {memory.memory_efficiency}, "
                        f"app memory: {memory.app_memory_gb:g}GB, "
                        f"compressed memory: {memory.compressed_memory_gb:g}GB"
                    ),
                    details=MemoryEfficiencyDetails(
                        memory_efficiency=memory.memory_efficiency,
                        app_memory_gb=memory.app_memory_gb,
                        compressed_memory_gb=memory.compressed_memory_gb,
                        compression_ratio=memory.compression_ratio,
                    ),
                    impact="Memory is wasted and overall performance drops",
                    quick_fixes=remedies.MEMORY_EFFICIENCY_QUICK,
                    long_term_fixes=remedies.MEMORY_EFFICIENCY_LONG_TERM,
                )
            )
        return issues

    def _pressure_issue(self, memory: MemoryState, processes: Sequence[ProcessRecord]) -> Issue | None:
        limits = self.thresholds.memory
        if (
            memory.usage_percent > limits.critical
            or memory.pressure == "critical"
            or memory.real_available_gb < MEMORY_CRITICAL_AVAILABLE_GB
        ):
            issue_type, severity, top_n = "memory_critical", "critical", 5
            title = "Memory is critically low"
            impact = "Apps may be killed and the system may become unstable"
        elif (
            memory.usage_percent > limits.warning
            or memory.pressure == "warning"
            or memory.real_available_gb < MEMORY_WARNING_AVAILABLE_GB
        ):
            issue_type, severity, top_n = "memory_warning", "warning", 3
            title = "Memory usage is high"
            impact = "Launching and switching apps may be slow"
        else:
            return None

        offenders = tuple(
            sorted(
                (proc for proc in processes if proc.memory_mb > MEMORY_PROCESS_FLOOR_MB),
                key=lambda proc: proc.memory_mb,
                reverse=True,
            )[:top_n]
        )
        return Issue(
            type=issue_type,
            severity=severity,
            title=title,
            description=(
                f"Memory usage is {memory.usage_percent:g}% "
                f"({memory.used_gb:g}GB/{memory.total_gb:g}GB), "
                f"actually available memory is {memory.real_available_gb:g}GB"
            ),
            details=MemoryDetails(
                usage_percent=memory.usage_percent,
                used_gb=memory.used_gb,
                total_gb=memory.total_gb,
                real_available_gb=memory.real_available_gb,
                pressure=memory.pressure,
                app_memory_gb=memory.app_memory_gb,
                wired_memory_gb=memory.wired_memory_gb,
                compressed_memory_gb=memory.compressed_memory_gb,
                swap_used_gb=memory.swap_used_gb,
                memory_efficiency=memory.memory_efficiency,
                top_processes=offenders,
            ),
            impact=impact,
            quick_fixes=tuple(remedies.memory_quick_fixes(memory, offenders)),
            long_term_fixes=tuple(remedies.memory_long_term_fixes(memory)),
        )

    def _swap_issue(self, memory: MemoryState) -> Issue | None:
        details = SwapDetails(
            swap_used_gb=memory.swap_used_gb,
            swap_pages_out=memory.swap_pages_out,
            memory_efficiency=memory.memory_efficiency,
        )
        if memory.swap_used_gb > SWAP_CRITICAL_GB:
            return Issue(
                type="swap_critical",
                severity="critical",
                title="Swap usage is at a critical level",
                description=(
                    f"{memory.swap_used_gb:g}GB of swap in use (pages swapped out: {memory.swap_pages_out})"
                ),
                details=details,
                impact="Overall performance drops sharply and apps become very slow",
                quick_fixes=remedies.SWAP_CRITICAL_QUICK,
                long_term_fixes=tuple(remedies.swap_critical_long_term_fixes(memory)),
            )
        if memory.swap_used_gb > SWAP_WARNING_GB:
            return Issue(
                type="swap_usage",
                severity="warning",
                title="Swap memory is in use",
                description=f"{memory.swap_used_gb:g}GB of swap in use",
                details=details,
                impact="Overall system performance drops",
                quick_fixes=remedies.SWAP_WARNING_QUICK,
                long_term_fixes=remedies.SWAP_WARNING_LONG_TERM,
            )
        return None


class DiskDetector:
    def __init__(self, thresholds: Thresholds = DEFAULT_THRESHOLDS):
        self.thresholds = thresholds

    def detect(self, disk: DiskState) -> List[Issue]:
        """Space and I/O are checked independently and may both fire."""
        issues: List[Issue] = []
        limits = self.thresholds.disk
        description = f"Disk usage is {disk.usage_percent:g}% ({disk.available_gb:g}GB left)"

        if disk.usage_percent > limits.critical:
            issues.append(
                Issue(
                    type="disk_space_critical",
                    severity="critical",
                    title="Disk space is running out",
                    description=description,
                    details=DiskSpaceDetails(
                        usage_percent=disk.usage_percent,
                        available_gb=disk.available_gb,
                        total_gb=disk.total_gb,
                        threshold=limits.critical,
                    ),
                    impact="The system may become unstable and files may fail to save",
                    quick_fixes=remedies.DISK_CRITICAL_QUICK,
                    long_term_fixes=remedies.DISK_CRITICAL_LONG_TERM,
                )
            )
        elif disk.usage_percent > limits.warning:
            issues.append(
                Issue(
                    type="disk_space_warning",
                    severity="warning",
                    title="Disk space is getting low",
                    description=description,
                    details=DiskSpaceDetails(
                        usage_percent=disk.usage_percent,
                        available_gb=disk.available_gb,
                        total_gb=disk.total_gb,
                        threshold=limits.warning,
                    ),
                    impact="Performance may soon suffer from lack of space",
                    quick_fixes=remedies.DISK_WARNING_QUICK,
                    long_term_fixes=remedies.DISK_WARNING_LONG_TERM,
                )
            )

        total_io = disk.io.read_mb_s + disk.io.write_mb_s
        if total_io > DISK_IO_LIMIT_MB_S:
            issues.append(
                Issue(
                    type="disk_io_high",
                    severity="warning",
                    title="Disk access is saturated",
                    description=f"Disk I/O: read {disk.io.read_mb_s:g}MB/s, write {disk.io.write_mb_s:g}MB/s",
                    details=DiskIODetails(
                        read_mb_s=disk.io.read_mb_s,
                        write_mb_s=disk.io.write_mb_s,
                        total_io=total_io,
                    ),
                    impact="File access slows down and the whole system feels sluggish",
                    quick_fixes=remedies.DISK_IO_QUICK,
                    long_term_fixes=remedies.DISK_IO_LONG_TERM,
                )
            )
        return issues


class ProcessPatternDetector:
    def __init__(self, catalog: ProcessCatalog = DEFAULT_CATALOG):
        self.catalog = catalog

    def detect(self, processes: Sequence[ProcessRecord]) -> List[Issue]:
        issues: List[Issue] = []

        browsers = [
            proc for proc in processes if self.catalog.is_browser(proc.name) and proc.cpu_percent > BROWSER_CPU_FLOOR
        ]
        if len(browsers) > BROWSER_PROCESS_LIMIT:
            issues.append(
                Issue(
                    type="browser_overload",
                    severity="warning",
                    title="Too many browser tabs are open",
                    description=f"{len(browsers)} browser processes are busy",
                    details=BrowserOverloadDetails(
                        browser_processes=len(browsers),
                        total_cpu=sum(proc.cpu_percent for proc in browsers),
                    ),
                    impact="The browser consumes a lot of memory and CPU and slows everything down",
                    quick_fixes=remedies.BROWSER_OVERLOAD_QUICK,
                    long_term_fixes=remedies.BROWSER_OVERLOAD_LONG_TERM,
                )
            )

        dev_tools = tuple(
            proc
            for proc in processes
            if self.catalog.is_development(proc.name) and proc.cpu_percent > DEVELOPMENT_CPU_FLOOR
        )
        if dev_tools:
            issues.append(
                Issue(
                    type="development_processes",
                    severity="info",
                    title="Development processes are running",
                    description=f"{len(dev_tools)} development processes are using CPU",
                    details=DevelopmentProcessDetails(dev_processes=dev_tools),
                    impact="Expected while developing, but stop them when they are not needed",
                    quick_fixes=remedies.DEVELOPMENT_QUICK,
                    long_term_fixes=remedies.DEVELOPMENT_LONG_TERM,
                )
            )
        return issues


def _busy_processes(processes: Sequence[ProcessRecord], floor: float) -> Tuple[ProcessRecord, ...]:
    # Caller order is kept: the list is expected to arrive ranked by CPU.
    return tuple(proc for proc in processes if proc.cpu_percent > floor)[:CPU_TOP_PROCESSES]
