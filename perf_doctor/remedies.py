"""Quick fixes and long-term recommendations attached to detected issues."""

from __future__ import annotations

from typing import List, Sequence

from .config import DEFAULT_CATALOG, ProcessCatalog
from .models import MemoryState, ProcessRecord

URGENT = "[URGENT]"

CPU_CRITICAL_LONG_TERM = (
    "Disable automatic launch of background apps",
    "Limit how long CPU-heavy apps run",
    "Run system cleanup on a regular schedule",
)
CPU_WARNING_LONG_TERM = (
    "Quit background apps you do not need",
    "Tune system settings for performance",
)
CPU_TEMPERATURE_QUICK = (
    "Pause heavy applications",
    "Move the machine somewhere cooler",
    "Give the machine a break for a while",
)
CPU_TEMPERATURE_LONG_TERM = (
    "Have the inside of the machine cleaned of dust",
    "Have the thermal paste replaced at a repair shop",
    "Improve the working environment (air conditioning, fans)",
)

SWAP_CRITICAL_QUICK = (
    "Quit non-essential apps immediately",
    "Drastically reduce open browser tabs",
    "Restart the system to reset memory",
)
SWAP_WARNING_QUICK = (
    "Quit apps that use a lot of memory",
    "Reduce the number of browser tabs",
)
SWAP_WARNING_LONG_TERM = (
    "Consider adding more RAM",
    "Switch to more memory-efficient apps",
)
MEMORY_EFFICIENCY_QUICK = (
    "Restart apps that may be leaking memory",
    "Fully quit apps you are not using",
)
MEMORY_EFFICIENCY_LONG_TERM = (
    "Identify memory-inefficient apps and replace them",
    "Schedule regular system restarts",
)

DISK_CRITICAL_QUICK = (
    "Clean up the Downloads folder",
    "Empty the Trash",
    "Move large files to external storage",
)
DISK_CRITICAL_LONG_TERM = (
    "Use a storage cleanup tool",
    "Uninstall applications you no longer use",
    "Make use of external storage",
)
DISK_WARNING_QUICK = (
    "Delete files you no longer need",
    "Clear cache files",
)
DISK_WARNING_LONG_TERM = (
    "Tidy up files on a regular schedule",
    "Make use of cloud storage",
)
DISK_IO_QUICK = (
    "Wait for the Time Machine backup to finish",
    "Pause large file copies or moves",
)
DISK_IO_LONG_TERM = (
    "Upgrade to an SSD if the system still runs on an HDD",
    "Reschedule backups to quieter hours",
)

BROWSER_OVERLOAD_QUICK = (
    "Close tabs you do not need",
    "Disable browser extensions",
    "Restart the browser",
)
BROWSER_OVERLOAD_LONG_TERM = (
    "Install a tab management extension",
    "Use bookmarks instead of open tabs",
    "Split work across different browsers",
)
DEVELOPMENT_QUICK = (
    "Stop development servers you are not using",
    "Stop Docker containers you do not need",
)
DEVELOPMENT_LONG_TERM = (
    "Streamline the development environment",
    "Set resource limits for development tooling",
)


def cpu_quick_fixes(
    top_processes: Sequence[ProcessRecord], catalog: ProcessCatalog = DEFAULT_CATALOG
) -> List[str]:
    """Suggest restarting or pausing killable CPU hogs, or generic waiting advice."""
    fixes: List[str] = []
    for proc in top_processes:
        if not proc.safe_to_kill:
            continue
        if catalog.is_browser(proc.name):
            fixes.append(f"Restart {proc.name} (currently using {_number(proc.cpu_percent)}% CPU)")
        else:
            fixes.append(f"Temporarily quit {proc.name} (using {_number(proc.cpu_percent)}% CPU)")

    if not fixes:
        fixes.extend(["Wait for heavy processes to finish", "Restart the machine"])
    return fixes


def memory_quick_fixes(memory: MemoryState, top_processes: Sequence[ProcessRecord]) -> List[str]:
    """Priority-ordered memory fixes; the most urgent come first."""
    fixes: List[str] = []

    if memory.real_available_gb < 0.5:
        fixes.append(f"{URGENT} Quit non-essential apps immediately")
        fixes.append(f"{URGENT} Drastically cut the number of open browser tabs")

    if memory.app_memory_gb > memory.total_gb * 0.7:
        fixes.append("App memory is overcommitted - quit the apps using the most memory")

    if memory.compressed_memory_gb > 2:
        fixes.append("Compressed memory is high - restart the system to refresh it")

    if top_processes:
        heaviest = top_processes[0]
        fixes.append(f'"{heaviest.name}" is using {heaviest.memory_mb / 1024:.1f}GB - consider quitting it')

    fixes.append("Check the Memory tab in Activity Monitor")
    fixes.append("Restart the machine to clear memory")
    return fixes


def memory_long_term_fixes(memory: MemoryState) -> List[str]:
    fixes: List[str] = []

    if memory.total_gb < 16:
        fixes.append(f"Adding RAM is strongly recommended (currently {_number(memory.total_gb)}GB -> 16GB or more)")
    elif memory.total_gb < 32 and memory.app_memory_gb > memory.total_gb * 0.8:
        fixes.append(f"Consider adding RAM (currently {_number(memory.total_gb)}GB -> 32GB)")

    if memory.memory_efficiency == "poor":
        fixes.append("Identify memory-inefficient apps and look for alternatives")

    fixes.append("Set a rule for how many apps run at the same time")
    fixes.append("Run a memory cleanup tool regularly")
    fixes.append("Trim the list of login items")
    return fixes


def swap_critical_long_term_fixes(memory: MemoryState) -> List[str]:
    return [
        f"Add RAM as a priority (currently {_number(memory.total_gb)}GB)",
        "Look for lighter alternatives to memory-hungry apps",
        "Strictly limit how many apps run at the same time",
    ]


def _number(value: float) -> str:
    return f"{value:g}"
