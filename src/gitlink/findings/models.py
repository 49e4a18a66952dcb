"""Finding data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

HIGH_ENTROPY_SECRET = "High Entropy Secret"


class DetectorKind(str, Enum):
    PATTERN = "pattern"
    ENTROPY = "entropy"


@dataclass(frozen=True)
class Finding:
    """A single candidate secret occurrence.

    ``commit`` is None for working-tree findings and the commit id for
    history findings. ``value`` is the matched secret itself; it never shows
    up in ``repr`` and reporters redact it.
    """

    secret_type: str
    file: str
    line: int  # 1-based
    column: int  # 1-based
    content: str  # source line, trailing whitespace trimmed
    fingerprint: str
    commit: Optional[str] = None
    detector: DetectorKind = DetectorKind.PATTERN
    value: str = field(default="", repr=False)

    @property
    def short_id(self) -> str:
        return self.fingerprint[:8]

    @property
    def from_history(self) -> bool:
        return self.commit is not None


@dataclass
class ScanResult:
    """Complete result of a scan run, after ignore-store filtering."""

    findings: List[Finding] = field(default_factory=list)
    ignored: int = 0  # findings removed by the ignore store
    skipped_files: List[str] = field(default_factory=list)
    scanned_files: int = 0
    commits_scanned: int = 0
    scan_duration_ms: float = 0.0

    @property
    def total_findings(self) -> int:
        return len(self.findings)

    @property
    def working_findings(self) -> List[Finding]:
        return [f for f in self.findings if not f.from_history]

    @property
    def history_findings(self) -> List[Finding]:
        return [f for f in self.findings if f.from_history]
