"""Git interface layer — subprocess adapter, diff parsing, models."""

from gitlink.git.adapter import (
    GitError,
    get_commit_diff,
    list_commits,
    list_tree_blobs,
    read_blob,
)
from gitlink.git.diff_parser import DiffParser
from gitlink.git.models import (
    CommitInfo,
    DiffFile,
    DiffLine,
    FileSkipped,
    FileStatus,
    TreeEntry,
)

__all__ = [
    "CommitInfo",
    "DiffFile",
    "DiffLine",
    "DiffParser",
    "FileSkipped",
    "FileStatus",
    "GitError",
    "TreeEntry",
    "get_commit_diff",
    "list_commits",
    "list_tree_blobs",
    "read_blob",
]
