"""Working-tree scanner — walk the project and scan files in parallel.

Exception safety: an unexpected error inside a worker is re-raised as
ScanError with a message that never carries matched secret values.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from gitlink.config.schema import GitLinkConfig
from gitlink.findings.models import Finding
from gitlink.patterns.registry import PatternRegistry
from gitlink.scanner.detect import LineDetector, split_lines
from gitlink.scanner.ignore_rules import GitIgnore, is_ignored

logger = logging.getLogger(__name__)

_GIT_DIR = ".git"
# Read in this order; later files take precedence
_IGNORE_FILENAMES = (".gitignore", ".ignore")


class ScanError(Exception):
    """Raised on internal scanner error (never contains secret values)."""


@dataclass
class FileScan:
    """Outcome of scanning one file."""

    path: str
    findings: List[Finding] = field(default_factory=list)
    skipped: Optional[str] = None  # 'oversized', 'binary', 'unreadable'


@dataclass
class TreeScan:
    """Outcome of a working-tree scan."""

    findings: List[Finding] = field(default_factory=list)
    scanned_files: int = 0
    skipped_files: List[str] = field(default_factory=list)


def iter_files(root: Path) -> Iterator[Tuple[Path, str]]:
    """Yield ``(absolute_path, relative_posix_path)`` for every file to scan.

    Hidden files are included, ``.git`` is never entered, and ``.gitignore``
    / ``.ignore`` files plus ``.git/info/exclude`` are honoured.
    """
    base_stack: List[GitIgnore] = []
    exclude = GitIgnore.from_file(root / _GIT_DIR / "info" / "exclude")
    if len(exclude):
        base_stack.append(exclude)

    stacks: Dict[str, List[GitIgnore]] = {}

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        if rel_dir == ".":
            rel_dir = ""
        parent = rel_dir.rpartition("/")[0]
        stack = list(base_stack if not rel_dir else stacks.get(parent, base_stack))
        for name in _IGNORE_FILENAMES:
            if name in filenames:
                ignore = GitIgnore.from_file(Path(dirpath) / name, rel_dir)
                if len(ignore):
                    stack.append(ignore)
        stacks[rel_dir] = stack

        kept = []
        for d in sorted(dirnames):
            rel = f"{rel_dir}/{d}" if rel_dir else d
            if d == _GIT_DIR or is_ignored(stack, rel, True):
                continue
            kept.append(d)
        dirnames[:] = kept

        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if is_ignored(stack, rel, False):
                continue
            full = Path(dirpath) / name
            if full.is_file():
                yield full, rel


def scan_file(
    path: Path,
    rel_path: str,
    detector: LineDetector,
    max_file_size: int,
) -> FileScan:
    """Scan one file. Oversized, binary and unreadable files are skipped."""
    result = FileScan(path=rel_path)
    try:
        if path.stat().st_size > max_file_size:
            result.skipped = "oversized"
            return result
        data = path.read_bytes()
    except OSError as exc:
        logger.debug("Cannot read %s: %s", rel_path, exc.strerror or exc)
        result.skipped = "unreadable"
        return result

    if b"\0" in data:
        result.skipped = "binary"
        return result

    text = data.decode("utf-8", errors="replace")
    for line_no, line in enumerate(split_lines(text), 1):
        result.findings.extend(detector.detect(rel_path, line_no, line))
    return result


def _worker_count(config: GitLinkConfig) -> int:
    return config.scan.workers or os.cpu_count() or 1


def run_working_tree_scan(
    root: Path,
    registry: PatternRegistry,
    config: Optional[GitLinkConfig] = None,
) -> TreeScan:
    """Scan every file under *root*; findings come back in no particular order."""
    cfg = config or GitLinkConfig()
    root = Path(root)
    detector = LineDetector(registry, cfg)
    files = list(iter_files(root))
    logger.info("Scanning %d file(s) under %s", len(files), root)

    tree = TreeScan()
    try:
        with ThreadPoolExecutor(max_workers=_worker_count(cfg)) as executor:
            results = executor.map(
                lambda item: scan_file(item[0], item[1], detector, cfg.scan.max_file_size),
                files,
            )
            for file_scan in results:
                if file_scan.skipped:
                    logger.debug("Skipped %s (%s)", file_scan.path, file_scan.skipped)
                    tree.skipped_files.append(f"{file_scan.path} ({file_scan.skipped})")
                    continue
                tree.scanned_files += 1
                tree.findings.extend(file_scan.findings)
    except Exception as exc:
        # Do not let findings (and their secret values) leak into the traceback
        count = len(tree.findings)
        tree.findings.clear()
        raise ScanError(
            f"Internal scanner error ({type(exc).__name__}) after {count} findings. "
            "Secrets have been scrubbed from this error."
        ) from None

    return tree


def scan_directory(
    root: Path,
    registry: PatternRegistry,
    config: Optional[GitLinkConfig] = None,
) -> List[Finding]:
    """Scan the working tree under *root* and return its findings."""
    return run_working_tree_scan(root, registry, config).findings
