"""
Rule-based performance diagnosis for personal computers: turns a resource snapshot
and a process list into ranked issues, remedies and a health score.
"""

from .logger import configure_library_defaults

configure_library_defaults()

__all__ = [
    "classification",
    "cli",
    "config",
    "detectors",
    "diagnostics",
    "errors",
    "formatting",
    "logger",
    "models",
    "remedies",
    "scoring",
    "system_state",
]
__version__ = "0.1.0"
