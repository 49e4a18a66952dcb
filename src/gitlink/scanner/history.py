"""History scanner — walk commits reachable from HEAD and scan what they added.

The default ``diff`` strategy parses each non-root, non-merge commit's
zero-context diff against its parent and runs every added line through the
line detector. The ``tree`` strategy scans every blob of every visited
commit once instead.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set

from gitlink.config.schema import GitLinkConfig
from gitlink.findings.models import Finding
from gitlink.git.adapter import (
    GitError,
    get_commit_diff,
    list_commits,
    list_tree_blobs,
    read_blob,
)
from gitlink.git.diff_parser import DiffParser
from gitlink.git.models import CommitInfo, DiffLine, FileSkipped
from gitlink.patterns.registry import PatternRegistry
from gitlink.scanner.detect import LineDetector, split_lines

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86400


@dataclass
class HistoryScan:
    """Outcome of a history scan."""

    findings: List[Finding] = field(default_factory=list)
    commits_scanned: int = 0
    commits_skipped: int = 0  # root, merge or outside the cutoff


def _cutoff(since_days: Optional[int]) -> Optional[float]:
    if since_days is None:
        return None
    return time.time() - since_days * _SECONDS_PER_DAY


def _scan_commit_diff(
    repo_root: Path, commit: CommitInfo, detector: LineDetector
) -> List[Finding]:
    diff_text = get_commit_diff(repo_root, commit.parents[0], commit.oid)
    findings: List[Finding] = []
    for item in DiffParser(diff_text).parse():
        if isinstance(item, FileSkipped):
            logger.debug("%s: skipped %s (%s)", commit.short, item.path, item.reason)
        elif isinstance(item, DiffLine):
            findings.extend(
                detector.detect(item.file, item.line_no, item.content, commit=commit.oid)
            )
    return findings


def _scan_commit_tree(
    repo_root: Path,
    commit: CommitInfo,
    detector: LineDetector,
    seen_blobs: Set[str],
    max_file_size: int,
) -> List[Finding]:
    findings: List[Finding] = []
    for entry in list_tree_blobs(repo_root, commit.oid):
        if entry.oid in seen_blobs:
            continue
        seen_blobs.add(entry.oid)
        if entry.size > max_file_size:
            logger.debug("%s: skipped %s (oversized)", commit.short, entry.path)
            continue
        data = read_blob(repo_root, entry.oid)
        if b"\0" in data:
            logger.debug("%s: skipped %s (binary)", commit.short, entry.path)
            continue
        text = data.decode("utf-8", errors="replace")
        for line_no, line in enumerate(split_lines(text), 1):
            findings.extend(detector.detect(entry.path, line_no, line, commit=commit.oid))
    return findings


def run_history_scan(
    repo_root: Path,
    registry: PatternRegistry,
    config: Optional[GitLinkConfig] = None,
    since_days: Optional[int] = None,
) -> HistoryScan:
    """Scan the history of the repository at *repo_root*.

    *since_days* overrides ``history.since_days`` from the config. A missing
    git binary, a directory that is not a repository, or a repository without
    commits produce an empty result.
    """
    cfg = config or GitLinkConfig()
    repo_root = Path(repo_root)
    days = since_days if since_days is not None else cfg.history.since_days
    cutoff = _cutoff(days)
    tree_mode = cfg.history.strategy == "tree"
    first_parent = not tree_mode and cfg.history.merges == "first-parent"

    result = HistoryScan()
    try:
        commits = list_commits(repo_root, first_parent=first_parent)
    except GitError as exc:
        logger.info("History scan skipped: %s", exc)
        return result

    logger.info(
        "Walking %d commit(s) in %s (strategy=%s)",
        len(commits), repo_root, cfg.history.strategy,
    )
    detector = LineDetector(registry, cfg)
    seen_blobs: Set[str] = set()

    for commit in commits:
        if cutoff is not None and commit.timestamp < cutoff:
            result.commits_skipped += 1
            continue
        if not tree_mode and (commit.is_root or commit.is_merge):
            logger.debug("Skipping %s commit %s", "root" if commit.is_root else "merge", commit.short)
            result.commits_skipped += 1
            continue

        try:
            if tree_mode:
                found = _scan_commit_tree(
                    repo_root, commit, detector, seen_blobs, cfg.scan.max_file_size
                )
            else:
                found = _scan_commit_diff(repo_root, commit, detector)
        except GitError as exc:
            logger.warning("Skipping commit %s: %s", commit.short, exc)
            result.commits_skipped += 1
            continue

        result.commits_scanned += 1
        result.findings.extend(found)

    return result


def scan_history(
    repo_root: Path,
    registry: PatternRegistry,
    config: Optional[GitLinkConfig] = None,
    since_days: Optional[int] = None,
) -> List[Finding]:
    """Scan the history of *repo_root* and return its findings."""
    return run_history_scan(repo_root, registry, config, since_days).findings
