"""Severity thresholds, process catalogs and environment-driven settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class Threshold:
    warning: float
    critical: float

    def __post_init__(self) -> None:
        if self.warning > self.critical:
            raise ValueError(f"warning threshold {self.warning} is above critical {self.critical}")


@dataclass(frozen=True)
class Thresholds:
    cpu: Threshold = Threshold(warning=70, critical=85)
    memory: Threshold = Threshold(warning=80, critical=90)
    disk: Threshold = Threshold(warning=85, critical=95)
    temperature: Threshold = Threshold(warning=70, critical=80)


DEFAULT_THRESHOLDS = Thresholds()


@dataclass(frozen=True)
class ProcessCatalog:
    """Name fragments used to recognise processes. Matching is case-insensitive substring."""

    browsers: Tuple[str, ...] = ("chrome",)
    development: Tuple[str, ...] = ("node", "python", "java", "docker")
    system: Tuple[str, ...] = (
        "kernel_task",
        "WindowServer",
        "loginwindow",
        "Dock",
        "Finder",
        "launchd",
        "mds",
        "mds_stores",
        "mdworker",
        "cfprefsd",
        "SystemUIServer",
        "NotificationCenter",
        "ControlCenter",
    )
    safe_to_kill: Tuple[str, ...] = (
        "Google Chrome",
        "Safari",
        "Firefox",
        "Slack",
        "Discord",
        "Spotify",
        "Adobe Photoshop",
        "Adobe Premiere Pro",
        "Visual Studio Code",
        "Xcode",
    )
    categories: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
        ("browser", ("chrome", "safari", "firefox", "edge")),
        ("development", ("xcode", "visual studio code", "node", "python", "java")),
        ("media", ("photoshop", "premiere", "final cut", "spotify", "vlc")),
        ("communication", ("slack", "discord", "zoom", "teams")),
        ("system", ("kernel_task", "windowserver", "spotlight", "mds")),
        ("virtualization", ("docker", "virtualbox", "parallels")),
    )
    descriptions: Dict[str, str] = field(
        default_factory=lambda: {
            "Google Chrome": "Web browser - Chrome main process",
            "Google Chrome Helper": "Web browser - Chrome helper (tabs, extensions)",
            "Safari": "Web browser - Safari",
            "Firefox": "Web browser - Firefox",
            "Adobe Photoshop": "Image editor - Photoshop",
            "Adobe Premiere Pro": "Video editor - Premiere Pro",
            "Final Cut Pro": "Video editor - Final Cut Pro",
            "Xcode": "IDE - Xcode",
            "Visual Studio Code": "Code editor - VS Code",
            "node": "Node.js process (dev server etc.)",
            "python": "Python script",
            "Docker Desktop": "Container runtime - Docker",
            "VirtualBox": "Virtual machine - VirtualBox",
            "Slack": "Chat - Slack",
            "Discord": "Chat - Discord",
            "Zoom": "Video meetings - Zoom",
            "Spotify": "Music streaming - Spotify",
            "Time Machine": "Backup - Time Machine",
            "Spotlight": "System search index",
            "mds_stores": "Spotlight indexing",
            "WindowServer": "System - window management",
            "kernel_task": "System - kernel",
        }
    )

    def is_browser(self, name: str) -> bool:
        return _matches(name, self.browsers)

    def is_development(self, name: str) -> bool:
        return _matches(name, self.development)


DEFAULT_CATALOG = ProcessCatalog()


def _matches(name: str, tokens: Tuple[str, ...]) -> bool:
    lowered = name.lower()
    return any(token.lower() in lowered for token in tokens)


class Settings(BaseSettings):
    """Runtime settings for the command line tool, read from ``PERF_DOCTOR_*`` variables."""

    model_config = SettingsConfigDict(env_prefix="PERF_DOCTOR_", case_sensitive=False)

    cpu_warning_threshold: float = 70.0  # % CPU usage
    cpu_critical_threshold: float = 85.0
    memory_warning_threshold: float = 80.0  # % memory usage
    memory_critical_threshold: float = 90.0
    disk_warning_threshold: float = 85.0  # % disk usage
    disk_critical_threshold: float = 95.0
    temperature_warning_threshold: float = 70.0  # degrees Celsius
    temperature_critical_threshold: float = 80.0

    browser_tokens: List[str] = list(DEFAULT_CATALOG.browsers)
    development_keywords: List[str] = list(DEFAULT_CATALOG.development)

    top_processes: int = 15
    io_sample_interval: float = 0.5  # seconds
    log_level: str = "WARNING"

    def thresholds(self) -> Thresholds:
        return Thresholds(
            cpu=Threshold(self.cpu_warning_threshold, self.cpu_critical_threshold),
            memory=Threshold(self.memory_warning_threshold, self.memory_critical_threshold),
            disk=Threshold(self.disk_warning_threshold, self.disk_critical_threshold),
            temperature=Threshold(self.temperature_warning_threshold, self.temperature_critical_threshold),
        )

    def catalog(self) -> ProcessCatalog:
        return ProcessCatalog(
            browsers=tuple(self.browser_tokens),
            development=tuple(self.development_keywords),
        )
