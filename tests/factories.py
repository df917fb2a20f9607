import contextlib
from dataclasses import replace
from datetime import datetime
from types import SimpleNamespace

from perf_doctor.models import CpuState, DiskIO, DiskState, MemoryState, ProcessRecord, SystemSnapshot


def make_snapshot(
    *,
    cpu_percent: float = 10,
    temperature=None,
    memory_percent: float = 10,
    total_gb: float = 32,
    real_available_gb: float = 20,
    pressure: str = "normal",
    app_memory_gb: float = 4,
    compressed_memory_gb: float = 0.5,
    swap_used_gb: float = 0,
    memory_efficiency: str = "excellent",
    disk_percent: float = 10,
    read_mb_s: float = 0,
    write_mb_s: float = 0,
) -> SystemSnapshot:
    return SystemSnapshot(
        timestamp=datetime(2024, 5, 1, 12, 0, 0),
        cpu=CpuState(usage_percent=cpu_percent, temperature_celsius=temperature),
        memory=MemoryState(
            usage_percent=memory_percent,
            used_gb=round(total_gb * memory_percent / 100, 1),
            total_gb=total_gb,
            real_available_gb=real_available_gb,
            pressure=pressure,
            app_memory_gb=app_memory_gb,
            wired_memory_gb=2,
            compressed_memory_gb=compressed_memory_gb,
            swap_used_gb=swap_used_gb,
            swap_pages_out=0,
            memory_efficiency=memory_efficiency,
        ),
        disk=DiskState(
            usage_percent=disk_percent,
            available_gb=400,
            total_gb=500,
            io=DiskIO(read_mb_s=read_mb_s, write_mb_s=write_mb_s),
        ),
    )


def make_process(name: str = "worker", *, pid: int = 100, cpu: float = 1, memory_mb: float = 50, killable=False):
    return ProcessRecord(pid=pid, name=name, cpu_percent=cpu, memory_mb=memory_mb, safe_to_kill=killable)


def with_memory(snapshot: SystemSnapshot, **changes) -> SystemSnapshot:
    return replace(snapshot, memory=replace(snapshot.memory, **changes))


def snapshot_payload() -> dict:
    return {
        "timestamp": "2024-05-01T12:00:00Z",
        "cpu": {"usage_percent": 35.5, "temperature_celsius": None},
        "memory": {
            "usage_percent": 62.0,
            "used_gb": 9.9,
            "total_gb": 16,
            "real_available_gb": 4.2,
            "pressure": "normal",
            "app_memory_gb": 6.1,
            "wired_memory_gb": 2.3,
            "compressed_memory_gb": 1.1,
            "swap_used_gb": 0.2,
            "swap_pages_out": 1200,
            "memory_efficiency": "good",
            "compression_ratio": 3.5,
        },
        "disk": {
            "usage_percent": 60,
            "available_gb": 190.5,
            "total_gb": 494.4,
            "io": {"read_mb_s": 1.5, "write_mb_s": 0.4},
        },
    }


class FakeProcess:
    """Stands in for psutil.Process in collector and CLI tests."""

    def __init__(self, pid, name, cpu, rss, user="alice", error=None):
        self.pid = pid
        self._name = name
        self._cpu = cpu
        self._rss = rss
        self._user = user
        self._error = error

    def oneshot(self):
        return contextlib.nullcontext()

    def cpu_percent(self, interval=None):
        if self._error is not None:
            raise self._error
        return self._cpu

    def memory_info(self):
        return SimpleNamespace(rss=self._rss)

    def name(self):
        return self._name

    def username(self):
        return self._user
