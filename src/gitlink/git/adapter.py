"""Git subprocess wrapper — history walk, diffs, blobs."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from gitlink.git.models import CommitInfo, TreeEntry

logger = logging.getLogger(__name__)

# Paths are printed verbatim (no octal escaping of non-ASCII names)
_BASE_ARGS = ["-c", "core.quotepath=off"]


class GitError(Exception):
    """Raised when git is unavailable or returns an unexpected error."""


def _invoke(args: list[str], cwd: Path, timeout: int) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *_BASE_ARGS, *args],
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except NotADirectoryError:
        raise GitError(f"not a directory: {cwd}")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")


def _check(result: subprocess.CompletedProcess, args: list[str]) -> None:
    if result.returncode == 0:
        return
    stderr = result.stderr.decode("utf-8", errors="replace").strip()
    raise GitError(f"git {args[0]} failed: {stderr or f'exit code {result.returncode}'}")


def _run_git(args: list[str], cwd: Path, timeout: int = 60) -> str:
    """Run a git command and return stdout as text. Raises GitError on failure."""
    result = _invoke(args, cwd, timeout)
    _check(result, args)
    return result.stdout.decode("utf-8", errors="replace")


def _run_git_bytes(args: list[str], cwd: Path, timeout: int = 60) -> bytes:
    """Run a git command and return raw stdout."""
    result = _invoke(args, cwd, timeout)
    _check(result, args)
    return result.stdout


def list_commits(repo_root: Path, *, first_parent: bool = False) -> List[CommitInfo]:
    """Return commits reachable from HEAD, newest first, in topological order."""
    args = ["rev-list", "--topo-order", "--parents", "--timestamp"]
    if first_parent:
        args.append("--first-parent")
    args.append("HEAD")
    out = _run_git(args, cwd=repo_root)

    commits: List[CommitInfo] = []
    for line in out.splitlines():
        # Format: <timestamp> <commit> [<parent> ...]
        parts = line.split()
        if len(parts) < 2:
            continue
        parents = tuple(parts[2:])
        if first_parent:
            # rev-list --first-parent still lists every parent of a merge
            parents = parents[:1] if parents else ()
        commits.append(CommitInfo(oid=parts[1], parents=parents, timestamp=int(parts[0])))
    return commits


def get_commit_diff(repo_root: Path, parent: str, commit: str) -> str:
    """Return the zero-context unified diff from *parent* to *commit*."""
    return _run_git(
        [
            "diff",
            "--unified=0",
            "--no-color",
            "--no-ext-diff",
            "--no-textconv",
            # Pin the prefixes the parser expects, whatever diff.noprefix says
            "--src-prefix=a/",
            "--dst-prefix=b/",
            parent,
            commit,
        ],
        cwd=repo_root,
        timeout=300,
    )


def list_tree_blobs(repo_root: Path, commit: str) -> List[TreeEntry]:
    """Return every blob in *commit*'s tree (recursively), with sizes."""
    out = _run_git_bytes(["ls-tree", "-r", "-l", "-z", commit], cwd=repo_root)
    entries: List[TreeEntry] = []
    for record in out.split(b"\0"):
        if not record:
            continue
        # Format: <mode> SP <type> SP <object> SP+ <size> TAB <path>
        meta, _, raw_path = record.partition(b"\t")
        fields = meta.decode("ascii", errors="replace").split()
        if len(fields) != 4 or fields[1] != "blob":
            continue
        try:
            size = int(fields[3])
        except ValueError:
            continue
        entries.append(
            TreeEntry(
                oid=fields[2],
                path=raw_path.decode("utf-8", errors="replace"),
                size=size,
            )
        )
    return entries


def read_blob(repo_root: Path, oid: str) -> bytes:
    """Return the raw content of blob *oid*."""
    return _run_git_bytes(["cat-file", "blob", oid], cwd=repo_root)
