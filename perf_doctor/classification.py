"""Label raw processes with a category, an impact level and a kill-safety verdict."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from .config import DEFAULT_CATALOG, ProcessCatalog
from .models import ProcessRecord

PRIVILEGED_USERS = ("root", "_system", "SYSTEM")
MAX_RECOMMENDATIONS = 5


def clean_process_name(name: str) -> str:
    cleaned = re.sub(r"^.*/", "", name)
    cleaned = re.sub(r"\s+\(.+\)$", "", cleaned).strip()
    return cleaned or name


def categorize(name: str, catalog: ProcessCatalog = DEFAULT_CATALOG) -> str:
    lowered = name.lower()
    for category, keywords in catalog.categories:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "other"


def is_safe_to_kill(name: str, user: Optional[str], catalog: ProcessCatalog = DEFAULT_CATALOG) -> bool:
    """Only known user-facing apps owned by a regular user are safe; system processes never are."""
    lowered = name.lower()
    if any(system.lower() in lowered for system in catalog.system):
        return False
    if not user or user in PRIVILEGED_USERS:
        return False
    return any(app.lower() in lowered for app in catalog.safe_to_kill)


def impact_level(cpu_percent: float, memory_mb: float) -> str:
    impact = cpu_percent * 0.6 + (memory_mb / 1024) * 0.4
    if impact > 50:
        return "high"
    if impact > 20:
        return "medium"
    return "low"


def describe(name: str, catalog: ProcessCatalog = DEFAULT_CATALOG) -> Optional[str]:
    if name in catalog.descriptions:
        return catalog.descriptions[name]
    lowered = name.lower()
    for key, description in catalog.descriptions.items():
        if key.lower() in lowered:
            return description
    return None


def classify(
    pid: int,
    raw_name: str,
    cpu_percent: float,
    memory_mb: float,
    user: Optional[str] = None,
    catalog: ProcessCatalog = DEFAULT_CATALOG,
) -> ProcessRecord:
    name = clean_process_name(raw_name or "Unknown")
    return ProcessRecord(
        pid=pid,
        name=name,
        cpu_percent=round(cpu_percent, 1),
        memory_mb=round(memory_mb, 1),
        safe_to_kill=is_safe_to_kill(name, user, catalog),
        user=user,
        category=categorize(name, catalog),
        description=describe(name, catalog),
        impact_level=impact_level(cpu_percent, memory_mb),
    )


def recommendations(processes: Sequence[ProcessRecord], catalog: ProcessCatalog = DEFAULT_CATALOG) -> List[str]:
    """Short per-process advice for the heaviest processes, capped at five entries."""
    advice: List[str] = []

    for proc in processes:
        if proc.cpu_percent <= 25:
            continue
        if catalog.is_browser(proc.name):
            advice.append(f"Tidy up tabs and extensions in {proc.name} (using {proc.cpu_percent:g}% CPU)")
        elif "node" in proc.name:
            advice.append(f"A development server ({proc.name}) is doing heavy work")
        elif proc.safe_to_kill:
            advice.append(f"Consider pausing {proc.name} for a while (using {proc.cpu_percent:g}% CPU)")

    for proc in processes:
        if proc.memory_mb > 1024 and proc.safe_to_kill:
            advice.append(f"{proc.name} is using {proc.memory_mb / 1024:.1f}GB of memory - consider quitting it")

    if sum(1 for proc in processes if proc.category == "browser") > 5:
        advice.append("Several browser processes are running; close the tabs you do not need")

    return advice[:MAX_RECOMMENDATIONS]
