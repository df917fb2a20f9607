"""Generate actionable diagnostics for a system snapshot and its process list."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import structlog

from .config import DEFAULT_CATALOG, DEFAULT_THRESHOLDS, ProcessCatalog, Thresholds
from .detectors import CpuDetector, DiskDetector, MemoryDetector, ProcessPatternDetector
from .models import DiagnosisResult, Issue, ProcessRecord, SystemSnapshot, validate_inputs
from .scoring import health_score, summarize

logger = structlog.get_logger(__name__)

TOP_PROCESSES_IN_RESULT = 5


class DiagnosticEngine:
    """Runs every detector over one snapshot and folds the findings into a result.

    The engine keeps no state between calls; one instance can serve any number
    of concurrent callers.
    """

    def __init__(self, thresholds: Thresholds = DEFAULT_THRESHOLDS, catalog: ProcessCatalog = DEFAULT_CATALOG):
        self.thresholds = thresholds
        self.catalog = catalog
        self.cpu = CpuDetector(thresholds, catalog)
        self.memory = MemoryDetector(thresholds)
        self.disk = DiskDetector(thresholds)
        self.process_patterns = ProcessPatternDetector(catalog)

    def diagnose(
        self,
        snapshot: SystemSnapshot,
        processes: Sequence[ProcessRecord],
        detailed: bool = False,
        timeframe: int = 60,
    ) -> DiagnosisResult:
        """Analyze a snapshot and return ranked issues, remedies and a health score.

        Args:
            snapshot: Resource readings taken at one point in time.
            processes: Running processes, ideally ranked by CPU usage. The first
                five are echoed back untouched as ``top_processes``.
            detailed: Attach the snapshot itself to the result.
            timeframe: Analysis window in seconds. Accepted for callers that
                pass it through; every detector works on the single snapshot.

        Raises:
            InvalidSnapshotError: if the snapshot or a process carries a
                missing or unusable value. No partial result is produced.
        """
        try:
            validate_inputs(snapshot, processes)

            issues: List[Issue] = []
            issues.extend(self.cpu.detect(snapshot.cpu, processes))
            issues.extend(self.memory.detect(snapshot.memory, processes))
            issues.extend(self.disk.detect(snapshot.disk))
            issues.extend(self.process_patterns.detect(processes))

            score = health_score(snapshot, issues)
            result = DiagnosisResult(
                timestamp=snapshot.timestamp,
                summary=summarize(issues, score),
                health_score=score,
                issues=issues,
                quick_fixes=_unique(fix for issue in issues for fix in issue.quick_fixes),
                long_term_recommendations=_unique(fix for issue in issues for fix in issue.long_term_fixes),
                top_processes=list(processes[:TOP_PROCESSES_IN_RESULT]),
                snapshot=snapshot if detailed else None,
            )
        except Exception:
            logger.debug("diagnosis_failed", exc_info=True)
            raise

        logger.debug(
            "diagnosis_completed",
            health_score=score,
            issues=len(issues),
            timeframe=timeframe,
        )
        return result


def diagnose(
    snapshot: SystemSnapshot,
    processes: Sequence[ProcessRecord],
    detailed: bool = False,
    timeframe: int = 60,
) -> DiagnosisResult:
    """Diagnose with the default thresholds and process catalog."""
    return DiagnosticEngine().diagnose(snapshot, processes, detailed=detailed, timeframe=timeframe)


def _unique(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))
