"""Typed inputs and outputs of the diagnostic engine."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import InvalidSnapshotError

PRESSURE_LEVELS = ("normal", "warning", "critical", "unknown")
EFFICIENCY_RATINGS = ("excellent", "good", "fair", "poor", "unknown")


@dataclass(frozen=True)
class CpuState:
    usage_percent: float
    temperature_celsius: Optional[float] = None


@dataclass(frozen=True)
class MemoryState:
    usage_percent: float
    used_gb: float
    total_gb: float
    real_available_gb: float
    pressure: str
    app_memory_gb: float
    wired_memory_gb: float
    compressed_memory_gb: float
    swap_used_gb: float
    swap_pages_out: int
    memory_efficiency: str
    compression_ratio: Optional[float] = None


@dataclass(frozen=True)
class DiskIO:
    read_mb_s: float
    write_mb_s: float


@dataclass(frozen=True)
class DiskState:
    usage_percent: float
    available_gb: float
    total_gb: float
    io: DiskIO


@dataclass(frozen=True)
class NetworkState:
    interface: str
    upload_mb_s: float
    download_mb_s: float
    total_sent_gb: float
    total_received_gb: float


@dataclass(frozen=True)
class SystemInfo:
    platform: str
    arch: str
    hostname: str
    uptime_seconds: float


@dataclass(frozen=True)
class SystemSnapshot:
    timestamp: datetime
    cpu: CpuState
    memory: MemoryState
    disk: DiskState
    # informational only, no detector reads these
    network: Optional[NetworkState] = None
    load_avg: Optional[Tuple[float, float, float]] = None
    system: Optional[SystemInfo] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SystemSnapshot":
        """Build a snapshot from its JSON form. Missing required keys raise ``KeyError``."""
        cpu = data["cpu"]
        memory = data["memory"]
        disk = data["disk"]
        return cls(
            timestamp=_parse_timestamp(data["timestamp"]),
            cpu=CpuState(
                usage_percent=cpu["usage_percent"],
                temperature_celsius=cpu.get("temperature_celsius"),
            ),
            memory=MemoryState(
                usage_percent=memory["usage_percent"],
                used_gb=memory["used_gb"],
                total_gb=memory["total_gb"],
                real_available_gb=memory["real_available_gb"],
                pressure=memory["pressure"],
                app_memory_gb=memory["app_memory_gb"],
                wired_memory_gb=memory["wired_memory_gb"],
                compressed_memory_gb=memory["compressed_memory_gb"],
                swap_used_gb=memory["swap_used_gb"],
                swap_pages_out=memory["swap_pages_out"],
                memory_efficiency=memory["memory_efficiency"],
                compression_ratio=memory.get("compression_ratio"),
            ),
            disk=DiskState(
                usage_percent=disk["usage_percent"],
                available_gb=disk["available_gb"],
                total_gb=disk["total_gb"],
                io=DiskIO(read_mb_s=disk["io"]["read_mb_s"], write_mb_s=disk["io"]["write_mb_s"]),
            ),
            network=NetworkState(**data["network"]) if data.get("network") else None,
            load_avg=tuple(data["load_avg"]) if data.get("load_avg") else None,
            system=SystemInfo(**data["system"]) if data.get("system") else None,
        )


@dataclass(frozen=True)
class ProcessRecord:
    pid: int
    name: str
    cpu_percent: float  # per core, can exceed 100 on multi-core machines
    memory_mb: float
    safe_to_kill: bool = False
    user: Optional[str] = None
    category: str = "other"
    description: Optional[str] = None
    impact_level: str = "low"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProcessRecord":
        return cls(
            pid=data["pid"],
            name=data["name"],
            cpu_percent=data["cpu_percent"],
            memory_mb=data["memory_mb"],
            safe_to_kill=bool(data.get("safe_to_kill", False)),
            user=data.get("user"),
            category=data.get("category", "other"),
            description=data.get("description"),
            impact_level=data.get("impact_level", "low"),
        )


@dataclass(frozen=True)
class CpuUsageDetails:
    current_usage: float
    threshold: float
    top_processes: Tuple[ProcessRecord, ...]


@dataclass(frozen=True)
class CpuTemperatureDetails:
    current_temp: float
    threshold: float


@dataclass(frozen=True)
class MemoryDetails:
    usage_percent: float
    used_gb: float
    total_gb: float
    real_available_gb: float
    pressure: str
    app_memory_gb: float
    wired_memory_gb: float
    compressed_memory_gb: float
    swap_used_gb: float
    memory_efficiency: str
    top_processes: Tuple[ProcessRecord, ...]


@dataclass(frozen=True)
class SwapDetails:
    swap_used_gb: float
    swap_pages_out: int
    memory_efficiency: str


@dataclass(frozen=True)
class MemoryEfficiencyDetails:
    memory_efficiency: str
    app_memory_gb: float
    compressed_memory_gb: float
    compression_ratio: Optional[float]


@dataclass(frozen=True)
class DiskSpaceDetails:
    usage_percent: float
    available_gb: float
    total_gb: float
    threshold: float


@dataclass(frozen=True)
class DiskIODetails:
    read_mb_s: float
    write_mb_s: float
    total_io: float


@dataclass(frozen=True)
class BrowserOverloadDetails:
    browser_processes: int
    total_cpu: float


@dataclass(frozen=True)
class DevelopmentProcessDetails:
    dev_processes: Tuple[ProcessRecord, ...]


IssueDetails = Union[
    CpuUsageDetails,
    CpuTemperatureDetails,
    MemoryDetails,
    SwapDetails,
    MemoryEfficiencyDetails,
    DiskSpaceDetails,
    DiskIODetails,
    BrowserOverloadDetails,
    DevelopmentProcessDetails,
]


@dataclass(frozen=True)
class Issue:
    type: str
    severity: str
    title: str
    description: str
    details: IssueDetails
    impact: str
    quick_fixes: Tuple[str, ...] = ()
    long_term_fixes: Tuple[str, ...] = ()


@dataclass
class DiagnosisResult:
    timestamp: datetime
    summary: str
    health_score: int
    issues: List[Issue]
    quick_fixes: List[str]
    long_term_recommendations: List[str]
    top_processes: List[ProcessRecord] = field(default_factory=list)
    snapshot: Optional[SystemSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["timestamp"] = self.timestamp.isoformat()
        if self.snapshot is not None:
            payload["snapshot"]["timestamp"] = self.snapshot.timestamp.isoformat()
        return payload


def validate_inputs(snapshot: SystemSnapshot, processes: Sequence[ProcessRecord]) -> None:
    """Reject snapshots and process lists the detectors cannot reason about.

    Raises:
        InvalidSnapshotError: on the first missing, non-numeric, negative or
            non-finite field, or on an unknown pressure/efficiency token.
    """
    cpu = snapshot.cpu
    _require_number("cpu.usage_percent", cpu.usage_percent)
    _optional_number("cpu.temperature_celsius", cpu.temperature_celsius)

    memory = snapshot.memory
    for name in (
        "usage_percent",
        "used_gb",
        "total_gb",
        "real_available_gb",
        "app_memory_gb",
        "wired_memory_gb",
        "compressed_memory_gb",
        "swap_used_gb",
        "swap_pages_out",
    ):
        _require_number(f"memory.{name}", getattr(memory, name))
    _optional_number("memory.compression_ratio", memory.compression_ratio)
    _require_token("memory.pressure", memory.pressure, PRESSURE_LEVELS)
    _require_token("memory.memory_efficiency", memory.memory_efficiency, EFFICIENCY_RATINGS)

    disk = snapshot.disk
    for name in ("usage_percent", "available_gb", "total_gb"):
        _require_number(f"disk.{name}", getattr(disk, name))
    _require_number("disk.io.read_mb_s", disk.io.read_mb_s)
    _require_number("disk.io.write_mb_s", disk.io.write_mb_s)

    for index, proc in enumerate(processes):
        if not isinstance(proc.name, str):
            raise InvalidSnapshotError(f"processes[{index}].name", proc.name, "expected a string")
        _require_number(f"processes[{index}].cpu_percent", proc.cpu_percent)
        _require_number(f"processes[{index}].memory_mb", proc.memory_mb)


def _require_number(name: str, value: Any) -> None:
    if value is None:
        raise InvalidSnapshotError(name, value, "required value is missing")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSnapshotError(name, value, "expected a number")
    if not math.isfinite(value):
        raise InvalidSnapshotError(name, value, "expected a finite number")
    if value < 0:
        raise InvalidSnapshotError(name, value, "expected a non-negative number")


def _optional_number(name: str, value: Any) -> None:
    if value is not None:
        _require_number(name, value)


def _require_token(name: str, value: Any, allowed: Sequence[str]) -> None:
    if value not in allowed:
        raise InvalidSnapshotError(name, value, f"expected one of {', '.join(allowed)}")


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
