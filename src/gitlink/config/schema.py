"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

OverlapPolicy = Literal["collapse", "report"]
HistoryStrategy = Literal["diff", "tree"]
MergePolicy = Literal["skip", "first-parent"]
FingerprintMode = Literal["positional", "content"]
OutputFormat = Literal["terminal", "json"]

OVERLAP_POLICIES = ("collapse", "report")
HISTORY_STRATEGIES = ("diff", "tree")
MERGE_POLICIES = ("skip", "first-parent")
FINGERPRINT_MODES = ("positional", "content")
OUTPUT_FORMATS = ("terminal", "json")

DEFAULT_MAX_FILE_SIZE = 2_000_000  # bytes


@dataclass
class ScanConfig:
    max_file_size: int = DEFAULT_MAX_FILE_SIZE  # files above this are skipped
    workers: int = 0  # 0 = os.cpu_count()
    overlap: OverlapPolicy = "collapse"


@dataclass
class EntropyConfig:
    enabled: bool = True
    min_entropy: float = 4.5
    min_length: int = 20


@dataclass
class PatternsConfig:
    enable: List[str] = field(default_factory=list)  # empty = all enabled
    disable: List[str] = field(default_factory=list)


@dataclass
class HistoryConfig:
    enabled: bool = False
    since_days: Optional[int] = None
    strategy: HistoryStrategy = "diff"
    merges: MergePolicy = "skip"


@dataclass
class FingerprintConfig:
    mode: FingerprintMode = "positional"


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_summary: bool = True


@dataclass
class GitLinkConfig:
    version: str = "1.0"
    scan: ScanConfig = field(default_factory=ScanConfig)
    entropy: EntropyConfig = field(default_factory=EntropyConfig)
    patterns: PatternsConfig = field(default_factory=PatternsConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    fingerprint: FingerprintConfig = field(default_factory=FingerprintConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
