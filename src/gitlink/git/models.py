"""Data models for git history access and diff parsing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class FileStatus(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True, slots=True)
class DiffLine:
    """A single added line from a unified diff, numbered in the new file."""

    file: str
    line_no: int
    content: str


@dataclass(frozen=True)
class DiffFile:
    """Metadata about a file appearing in a diff."""

    path: str
    old_path: Optional[str] = None  # set on renames
    status: FileStatus = FileStatus.MODIFIED


@dataclass(frozen=True)
class FileSkipped:
    """Record of a file the diff carries no scannable text for."""

    path: str
    reason: str  # 'binary', 'mode_only', 'unparsed'


@dataclass(frozen=True)
class CommitInfo:
    """One entry of a history walk."""

    oid: str
    parents: Tuple[str, ...]
    timestamp: int  # committer time, seconds since the epoch

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def short(self) -> str:
        return self.oid[:8]


@dataclass(frozen=True)
class TreeEntry:
    """A blob reachable from a commit's tree."""

    oid: str
    path: str
    size: int
