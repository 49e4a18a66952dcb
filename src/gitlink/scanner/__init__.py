"""Scanners — per-line detection, working tree and git history."""

from gitlink.scanner.detect import LineDetector, split_lines
from gitlink.scanner.entropy import find_high_entropy, shannon_entropy
from gitlink.scanner.history import HistoryScan, run_history_scan, scan_history
from gitlink.scanner.worktree import (
    ScanError,
    TreeScan,
    iter_files,
    run_working_tree_scan,
    scan_directory,
)

__all__ = [
    "HistoryScan",
    "LineDetector",
    "ScanError",
    "TreeScan",
    "find_high_entropy",
    "iter_files",
    "run_history_scan",
    "run_working_tree_scan",
    "scan_directory",
    "scan_history",
    "shannon_entropy",
    "split_lines",
]
