"""Exceptions raised by perf-doctor."""


class PerfDoctorError(Exception):
    """Base class for all perf-doctor errors."""


class InvalidSnapshotError(PerfDoctorError, ValueError):
    """A snapshot or process record is missing a field or carries an unusable value."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}: {reason} (got {value!r})")
