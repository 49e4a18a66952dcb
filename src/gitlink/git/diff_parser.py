"""Unified diff parser for ``git diff --unified=0`` output.

Yields DiffFile for each file section, DiffLine for each added line
(numbered in the new version of the file) and FileSkipped for sections
with no scannable text. Handles CRLF, binary markers, renames, mode-only
changes, submodule pointers, C-quoted path names and every hunk header
variant. Paths are expected with git's default ``a/`` and ``b/`` prefixes.
"""

from __future__ import annotations

import re
from typing import Generator, List, Optional, Tuple, Union

from gitlink.git.models import DiffFile, DiffLine, FileSkipped, FileStatus

_DIFF_HEADER = "diff --git "
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_BINARY_RE = re.compile(r"^Binary files .* and .* differ$")
_RENAME_FROM_RE = re.compile(r"^rename from (.+)$")
_RENAME_TO_RE = re.compile(r"^rename to (.+)$")
_SUBPROJECT_RE = re.compile(r"^\+Subproject commit [0-9a-f]+$")
_OLD_SIDE_RE = re.compile(r"^--- (.+)$")
_NEW_SIDE_RE = re.compile(r"^\+\+\+ (.+)$")
_NEW_FILE_RE = re.compile(r"^new file mode \d+$")
_DELETED_FILE_RE = re.compile(r"^deleted file mode \d+$")
_OLD_MODE_RE = re.compile(r"^old mode \d+$")
_OCTAL_RE = re.compile(r"[0-7]{3}")
_SKIPPABLE_SUB_RE = re.compile(
    r"^(?:index [0-9a-f]+\.\.[0-9a-f]+|similarity index \d+%|dissimilarity index \d+%"
    r"|new mode \d+|copy from .+|copy to .+)"
)
_DEV_NULL = "/dev/null"

# git's C-style escapes in quoted path names
_ESCAPES = {
    "a": 0x07, "b": 0x08, "f": 0x0C, "n": 0x0A, "r": 0x0D,
    "t": 0x09, "v": 0x0B, "\\": 0x5C, '"': 0x22,
}

DiffItem = Union[DiffLine, DiffFile, FileSkipped]


def _clean(content: str) -> str:
    """Drop a trailing CR."""
    if content.endswith("\r"):
        content = content[:-1]
    return content


def _read_quoted(text: str, start: int) -> Tuple[str, int]:
    """Decode the quoted name opening at ``text[start]``.

    Returns the name and the index just past its closing quote. Octal
    escapes are raw bytes, so the name is rebuilt as UTF-8.
    """
    out = bytearray()
    i, n = start + 1, len(text)
    while i < n:
        c = text[i]
        if c == '"':
            return out.decode("utf-8", errors="replace"), i + 1
        if c == "\\" and i + 1 < n:
            if _OCTAL_RE.match(text, i + 1):
                out.append(int(text[i + 1:i + 4], 8) & 0xFF)
                i += 4
                continue
            nxt = text[i + 1]
            if nxt in _ESCAPES:
                out.append(_ESCAPES[nxt])
            else:
                out.extend(nxt.encode("utf-8"))
            i += 2
            continue
        out.extend(c.encode("utf-8"))
        i += 1
    raise ValueError(f"unterminated quoted name: {text[start:]!r}")


def unquote_path(value: str) -> str:
    """Undo git's quoting of a path name; unquoted names pass through."""
    if value.startswith('"'):
        try:
            name, end = _read_quoted(value, 0)
        except ValueError:
            return value
        if end == len(value):
            return name
    return value


def _strip_prefix(path: str, prefix: str) -> str:
    return path[len(prefix):] if path.startswith(prefix) else path


def _side_path(value: str, prefix: str) -> Optional[str]:
    """Path from a ``---``/``+++`` line, or None for /dev/null."""
    # git appends a tab after names that contain a space
    if value.endswith("\t"):
        value = value[:-1]
    if value == _DEV_NULL:
        return None
    return _strip_prefix(unquote_path(value), prefix)


def split_header_paths(rest: str) -> Optional[Tuple[str, str]]:
    """Split what follows ``diff --git `` into (old, new) paths.

    Unquoted names may contain spaces and even `` b/``, so this is a best
    guess; ``+++`` and ``rename to`` lines, when present, take precedence.
    """
    try:
        if rest.startswith('"'):
            old, end = _read_quoted(rest, 0)
            new_raw = rest[end:].lstrip(" ")
            new = unquote_path(new_raw)
        elif rest.endswith('"') and ' "' in rest:
            # An unquoted name never contains '"'
            cut = rest.index(' "')
            old, new = rest[:cut], unquote_path(rest[cut + 1:])
        else:
            half = (len(rest) - 1) // 2
            if len(rest) % 2 == 1 and rest[half] == " " and rest[2:half] == rest[half + 3:]:
                old, new = rest[:half], rest[half + 1:]
            else:
                old, sep, tail = rest.partition(" b/")
                if not sep:
                    return None
                new = "b/" + tail
    except ValueError:
        return None
    if not (old.startswith("a/") and new.startswith("b/")):
        return None
    return old[2:], new[2:]


class DiffParser:
    """Parse unified diff text.

    Usage::

        for item in DiffParser(diff_text).parse():
            if isinstance(item, DiffLine):
                ...
    """

    def __init__(self, diff_text: str) -> None:
        self._lines: List[str] = diff_text.split("\n")

    def parse(self) -> Generator[DiffItem, None, None]:
        idx = 0
        total = len(self._lines)
        current_file: Optional[str] = None
        in_hunk = False
        line_no = 0

        while idx < total:
            raw_line = self._lines[idx]

            if raw_line.startswith(_DIFF_HEADER):
                # Every section starts clean, even if its header is unreadable
                current_file = None
                in_hunk = False
                paths = split_header_paths(raw_line[len(_DIFF_HEADER):])
                idx, item = self._parse_file_header(idx + 1, raw_line, paths)
                if isinstance(item, DiffFile):
                    current_file = item.path
                yield item
                continue

            hm = _HUNK_HEADER_RE.match(raw_line)
            if hm and current_file is not None:
                line_no = int(hm.group(3))
                in_hunk = True
                idx += 1
                continue

            if not in_hunk or current_file is None:
                idx += 1
                continue

            if raw_line.startswith("+"):
                if not _SUBPROJECT_RE.match(raw_line):
                    yield DiffLine(file=current_file, line_no=line_no, content=_clean(raw_line[1:]))
                line_no += 1
            elif raw_line.startswith(" "):
                line_no += 1
            # '-' lines and '\ No newline' markers do not advance the new file
            idx += 1

    def _parse_file_header(
        self, idx: int, header: str, paths: Optional[Tuple[str, str]]
    ) -> tuple[int, Union[DiffFile, FileSkipped]]:
        """Consume extended header lines; return the next index and the file item."""
        total = len(self._lines)
        old_path, new_path = paths if paths else (None, None)
        status = FileStatus.MODIFIED
        mode_change = False
        binary = False

        while idx < total:
            sub = self._lines[idx]
            if _NEW_FILE_RE.match(sub):
                status = FileStatus.ADDED
            elif _DELETED_FILE_RE.match(sub):
                status = FileStatus.DELETED
            elif _OLD_MODE_RE.match(sub):
                mode_change = True
            elif (rm := _RENAME_FROM_RE.match(sub)):
                old_path = unquote_path(rm.group(1))
                status = FileStatus.RENAMED
            elif (rt := _RENAME_TO_RE.match(sub)):
                new_path = unquote_path(rt.group(1))
            elif _BINARY_RE.match(sub):
                binary = True
            elif (om := _OLD_SIDE_RE.match(sub)):
                old_path = _side_path(om.group(1), "a/") or old_path
            elif (nm := _NEW_SIDE_RE.match(sub)):
                new_path = _side_path(nm.group(1), "b/") or new_path
            elif _SKIPPABLE_SUB_RE.match(sub):
                pass
            else:
                break
            idx += 1

        path = new_path or old_path
        if path is None:
            return idx, FileSkipped(path=header[len(_DIFF_HEADER):], reason="unparsed")
        if binary:
            return idx, FileSkipped(path=path, reason="binary")
        if mode_change and not self._has_hunk_at(idx):
            return idx, FileSkipped(path=path, reason="mode_only")
        return idx, DiffFile(
            path=path,
            old_path=old_path if status == FileStatus.RENAMED else None,
            status=status,
        )

    def _has_hunk_at(self, idx: int) -> bool:
        return idx < len(self._lines) and bool(_HUNK_HEADER_RE.match(self._lines[idx]))
