"""Tests for the psutil collector, with psutil replaced by fakes."""

from types import SimpleNamespace

import psutil
import pytest

from perf_doctor import system_state
from perf_doctor.diagnostics import diagnose
from perf_doctor.models import NetworkState, validate_inputs

from tests.factories import FakeProcess

GB = 1024**3
MB = 1024**2


@pytest.fixture
def fake_psutil(monkeypatch):
    monkeypatch.setattr(system_state.time, "sleep", lambda seconds: None)
    monkeypatch.setattr(system_state.psutil, "cpu_percent", lambda interval=None: 42.04)
    monkeypatch.setattr(
        system_state.psutil,
        "sensors_temperatures",
        lambda: {"coretemp": [SimpleNamespace(label="Package id 0", current=64.26)]},
        raising=False,
    )
    monkeypatch.setattr(
        system_state.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(
            total=16 * GB,
            available=6 * GB,
            used=10 * GB,
            free=3 * GB,
            percent=62.5,
            active=7 * GB,
            wired=2 * GB,
        ),
    )
    monkeypatch.setattr(
        system_state.psutil,
        "swap_memory",
        lambda: SimpleNamespace(used=int(0.5 * GB), sout=4096 * 10),
    )
    monkeypatch.setattr(
        system_state.psutil,
        "disk_usage",
        lambda path: SimpleNamespace(total=500 * GB, free=100 * GB, percent=80.0),
    )
    counters = iter(
        [
            SimpleNamespace(read_bytes=0, write_bytes=0),
            SimpleNamespace(read_bytes=30 * MB, write_bytes=10 * MB),
        ]
    )
    monkeypatch.setattr(system_state.psutil, "disk_io_counters", lambda: next(counters))
    interfaces = iter(
        [
            {
                "lo0": SimpleNamespace(bytes_sent=5 * GB, bytes_recv=5 * GB),
                "en0": SimpleNamespace(bytes_sent=1 * GB, bytes_recv=2 * GB),
            },
            {
                "lo0": SimpleNamespace(bytes_sent=6 * GB, bytes_recv=6 * GB),
                "en0": SimpleNamespace(bytes_sent=1 * GB + 1 * MB, bytes_recv=2 * GB + 4 * MB),
            },
        ]
    )
    monkeypatch.setattr(system_state.psutil, "net_io_counters", lambda pernic=False: next(interfaces))
    monkeypatch.setattr(system_state.psutil, "boot_time", lambda: system_state.time.time() - 7200)
    monkeypatch.setattr(system_state.os, "getloadavg", lambda: (1.234, 0.5, 0.25), raising=False)
    monkeypatch.setattr(system_state.mmap, "PAGESIZE", 4096)


def test_gather_snapshot(fake_psutil):
    snapshot = system_state.gather_snapshot(io_interval=0.5)

    assert snapshot.cpu.usage_percent == 42.0
    assert snapshot.cpu.temperature_celsius == 64.3
    assert snapshot.memory.total_gb == 16.0
    assert snapshot.memory.real_available_gb == 6.0
    assert snapshot.memory.app_memory_gb == 7.0
    assert snapshot.memory.wired_memory_gb == 2.0
    assert snapshot.memory.pressure == "normal"
    assert snapshot.memory.memory_efficiency == "excellent"
    assert snapshot.memory.swap_pages_out == 10
    assert snapshot.disk.available_gb == 100.0
    assert snapshot.disk.io.read_mb_s == 60.0
    assert snapshot.disk.io.write_mb_s == 20.0
    assert snapshot.network == NetworkState(
        interface="en0", upload_mb_s=2.0, download_mb_s=8.0, total_sent_gb=1.0, total_received_gb=2.0
    )
    assert snapshot.load_avg == (1.23, 0.5, 0.25)
    assert 7190 <= snapshot.system.uptime_seconds <= 7210
    assert snapshot.system.platform
    validate_inputs(snapshot, [])


def test_gathered_snapshot_can_be_diagnosed(fake_psutil):
    result = diagnose(system_state.gather_snapshot(), [])
    assert 0 <= result.health_score <= 100


@pytest.mark.parametrize(
    "usage, swap_gb, expected",
    [(50, 0, "normal"), (90, 0, "warning"), (50, 1.5, "warning"), (96, 0, "critical"), (50, 3, "critical")],
)
def test_memory_pressure(usage, swap_gb, expected):
    assert system_state._memory_pressure(usage, swap_gb * GB) == expected


@pytest.mark.parametrize(
    "free_gb, compressed_gb, expected",
    [(3, 0, "excellent"), (1.5, 1, "good"), (1.5, 0, "fair"), (0.6, 0, "fair"), (0.2, 2, "poor")],
)
def test_memory_efficiency(free_gb, compressed_gb, expected):
    assert system_state._memory_efficiency(free_gb, compressed_gb) == expected


def test_temperature_missing_when_no_sensors(monkeypatch):
    monkeypatch.setattr(system_state.psutil, "sensors_temperatures", lambda: {}, raising=False)
    assert system_state._cpu_temperature() is None


def test_gather_processes_sorts_filters_and_skips_vanished(monkeypatch):
    monkeypatch.setattr(system_state.time, "sleep", lambda seconds: None)
    processes = [
        FakeProcess(1, "/Applications/Slack.app/Contents/MacOS/Slack", 12.0, 300 * MB),
        FakeProcess(2, "Google Chrome", 55.0, 900 * MB),
        FakeProcess(3, "idle", 0.0, 0),
        FakeProcess(4, "gone", 0.0, 0, error=psutil.NoSuchProcess(4)),
        FakeProcess(5, "kernel_task", 30.0, 2048 * MB, user="root"),
    ]
    monkeypatch.setattr(system_state.psutil, "process_iter", lambda: iter(processes))

    by_cpu = system_state.gather_processes(limit=10)
    assert [record.pid for record in by_cpu] == [2, 5, 1]
    assert by_cpu[0].safe_to_kill is True
    assert by_cpu[1].safe_to_kill is False
    assert by_cpu[2].name == "Slack"

    monkeypatch.setattr(system_state.psutil, "process_iter", lambda: iter(processes))
    by_memory = system_state.gather_processes(sort_by="memory", limit=2)
    assert [record.pid for record in by_memory] == [5, 2]


def test_gather_processes_rejects_unknown_sort():
    with pytest.raises(ValueError):
        system_state.gather_processes(sort_by="pid")


def test_efficiency_uses_available_memory_without_wired_pages(fake_psutil, monkeypatch):
    # Linux reports most reclaimable cache outside of "free"
    monkeypatch.setattr(
        system_state.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(total=16 * GB, available=6 * GB, used=10 * GB, free=int(0.2 * GB), percent=62.5),
    )
    snapshot = system_state.gather_snapshot()
    assert snapshot.memory.wired_memory_gb == 0.0
    assert snapshot.memory.memory_efficiency == "excellent"


def test_free_memory_drives_efficiency_when_wired_is_reported(fake_psutil, monkeypatch):
    monkeypatch.setattr(
        system_state.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(
            total=16 * GB, available=6 * GB, used=10 * GB, free=int(0.2 * GB), percent=62.5, active=7 * GB, wired=2 * GB
        ),
    )
    assert system_state.gather_snapshot().memory.memory_efficiency == "poor"


def test_network_prefers_busy_non_loopback_interface():
    counters = {
        "lo": SimpleNamespace(bytes_sent=9 * GB, bytes_recv=9 * GB),
        "eth0": SimpleNamespace(bytes_sent=0, bytes_recv=0),
        "wlan0": SimpleNamespace(bytes_sent=3 * GB, bytes_recv=5 * GB),
    }
    network = system_state._network_state(counters, counters, 0.5)
    assert network.interface == "wlan0"
    assert network.upload_mb_s == 0.0
    assert network.total_received_gb == 5.0


def test_network_falls_back_to_first_interface():
    counters = {"lo": SimpleNamespace(bytes_sent=1 * GB, bytes_recv=1 * GB)}
    assert system_state._network_state({}, counters, 0.5).interface == "lo"


def test_network_unknown_without_interfaces():
    network = system_state._network_state({}, {}, 0.5)
    assert network == NetworkState(
        interface="Unknown", upload_mb_s=0.0, download_mb_s=0.0, total_sent_gb=0.0, total_received_gb=0.0
    )


def test_load_average_missing_on_platforms_without_it(monkeypatch):
    monkeypatch.delattr(system_state.os, "getloadavg", raising=False)
    assert system_state._load_average() is None
