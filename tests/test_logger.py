import math

import pytest
import structlog

from perf_doctor.diagnostics import diagnose
from perf_doctor.errors import InvalidSnapshotError
from perf_doctor.logger import configure_library_defaults

from tests.factories import make_snapshot


@pytest.fixture
def unconfigured_structlog():
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    configure_library_defaults()


def test_library_use_is_quiet_by_default(unconfigured_structlog, capsys):
    configure_library_defaults()

    diagnose(make_snapshot(cpu_percent=90), [])
    with pytest.raises(InvalidSnapshotError):
        diagnose(make_snapshot(cpu_percent=math.nan), [])

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_warnings_go_to_stderr(unconfigured_structlog, capsys):
    configure_library_defaults()

    structlog.get_logger("perf_doctor.tests").warning("disk_sampling_skipped")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "disk_sampling_skipped" in captured.err


def test_existing_configuration_is_left_alone(unconfigured_structlog):
    structlog.configure(processors=[structlog.processors.JSONRenderer()])
    configure_library_defaults()
    assert isinstance(structlog.get_config()["processors"][0], structlog.processors.JSONRenderer)
