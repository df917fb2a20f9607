import json
from dataclasses import replace

import pytest

from perf_doctor.diagnostics import diagnose
from perf_doctor.formatting import (
    format_diagnosis,
    format_process_table,
    format_snapshot,
    format_uptime,
    render_table,
    to_json,
)
from perf_doctor.models import NetworkState, SystemInfo

from tests.factories import make_process, make_snapshot


def test_render_table_pads_columns():
    table = render_table(["a", "bb"], [["xxx", "y"]])
    assert table.splitlines() == ["a   | bb", "--- | --", "xxx | y "]


def test_process_table_empty():
    assert format_process_table([]) == "No process data"


def test_snapshot_text_mentions_temperature_only_when_known():
    assert "°C" not in format_snapshot(make_snapshot())
    assert "72°C" in format_snapshot(make_snapshot(temperature=72))


def test_healthy_diagnosis_text():
    text = format_diagnosis(diagnose(make_snapshot(), []))
    assert "Health score: 100/100" in text
    assert "No obvious bottleneck found." in text
    assert "Quick fixes:" not in text


def test_diagnosis_text_lists_issues_and_fixes():
    result = diagnose(make_snapshot(cpu_percent=90), [make_process("Chrome", cpu=40, killable=True)], detailed=True)
    text = format_diagnosis(result)
    assert "CPU usage is at a critical level" in text
    assert "- Restart Chrome (currently using 40% CPU)" in text
    assert "Time: 2024-05-01 12:00:00" in text
    assert "Top processes:" in text


def test_to_json_round_trips_through_json():
    result = diagnose(make_snapshot(memory_percent=95), [make_process("Docker", memory_mb=4096)])
    payload = json.loads(to_json(result))
    assert payload["health_score"] == result.health_score
    assert payload["issues"][0]["type"] == "memory_critical"
    assert payload["snapshot"] is None


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "unknown"), (59, "0m"), (125, "2m"), (3 * 3600 + 60, "3h 1m"), (93784, "1d 2h 3m")],
)
def test_format_uptime(seconds, expected):
    assert format_uptime(seconds) == expected


def test_snapshot_text_without_network_or_system():
    text = format_snapshot(make_snapshot())
    assert "Network:" not in text
    assert "System:" not in text
    assert "load" not in text


def test_snapshot_text_with_network_load_and_system():
    snapshot = replace(
        make_snapshot(),
        network=NetworkState("en0", upload_mb_s=0.25, download_mb_s=3.5, total_sent_gb=1.2, total_received_gb=8.4),
        load_avg=(2.5, 1.75, 1.0),
        system=SystemInfo(platform="Darwin", arch="arm64", hostname="studio", uptime_seconds=93784),
    )
    lines = format_snapshot(snapshot).splitlines()
    assert lines[1] == "CPU: 10% | load (1/5/15) 2.50 / 1.75 / 1.00"
    assert lines[-2] == "Network: en0 | up 0.25 MB/s, down 3.50 MB/s | sent 1.2 GB, received 8.4 GB"
    assert lines[-1] == "System: studio | Darwin arm64 | up 1d 2h 3m"


def test_idle_network_omits_rates():
    snapshot = replace(
        make_snapshot(),
        network=NetworkState("eth0", upload_mb_s=0, download_mb_s=0, total_sent_gb=0.1, total_received_gb=0.3),
    )
    assert "Network: eth0 | sent 0.1 GB, received 0.3 GB" in format_snapshot(snapshot)
