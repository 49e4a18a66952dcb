"""gitignore-style path exclusion for the working-tree walk.

Supported syntax (the parts of gitignore(5) a walk needs):
  - blank lines and ``#`` comments are skipped; ``\\#`` and ``\\!`` escape.
  - ``!pattern`` re-includes a path excluded by an earlier rule.
  - a trailing ``/`` matches directories only.
  - a ``/`` at the start or in the middle anchors the pattern to the
    directory holding the ignore file; otherwise it matches at any depth.
  - ``*``, ``?``, ``[...]`` never cross ``/``; ``**`` does.

Within one file the last matching rule wins; rules from deeper files
override rules from shallower ones.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IgnoreRule:
    regex: re.Pattern[str]
    negated: bool
    dir_only: bool
    source: str  # e.g. '.gitignore:3'


def _translate(glob: str) -> str:
    """Translate a gitignore glob (without anchoring) into a regex body."""
    out: List[str] = []
    i, n = 0, len(glob)
    while i < n:
        c = glob[i]
        if c == "*":
            at_segment_start = i == 0 or glob[i - 1] == "/"
            if glob[i:i + 2] == "**" and at_segment_start:
                if i + 2 == n:
                    out.append(".*")
                    i += 2
                    continue
                if glob[i + 2] == "/":
                    out.append("(?:.*/)?")
                    i += 3
                    continue
            # Runs of plain asterisks collapse into one
            while i < n and glob[i] == "*":
                i += 1
            out.append("[^/]*")
            continue
        if c == "?":
            out.append("[^/]")
        elif c == "[":
            j = i + 1
            if j < n and glob[j] in "!^":
                j += 1
            if j < n and glob[j] == "]":
                j += 1
            while j < n and glob[j] != "]":
                j += 1
            if j >= n:
                out.append(re.escape(c))
            else:
                stuff = glob[i + 1:j].replace("\\", "\\\\")
                if stuff[0] in "!^":
                    stuff = "^" + stuff[1:]
                out.append(f"[{stuff}]")
                i = j
        elif c == "\\" and i + 1 < n:
            i += 1
            out.append(re.escape(glob[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


def parse_rule(raw: str, source: str) -> Optional[IgnoreRule]:
    """Parse one ignore-file line into a rule, or None for blanks/comments."""
    line = raw.rstrip("\n").rstrip("\r")
    # Trailing spaces are dropped unless escaped
    if not line.endswith("\\ "):
        line = line.rstrip(" ")
    if not line or line.startswith("#"):
        return None

    negated = False
    if line.startswith("!"):
        negated = True
        line = line[1:]
    elif line.startswith("\\!") or line.startswith("\\#"):
        line = line[1:]

    dir_only = line.endswith("/")
    line = line.rstrip("/")
    if not line:
        return None

    anchored = "/" in line
    line = line.lstrip("/")
    body = _translate(line)
    prefix = "^" if anchored else "^(?:.*/)?"
    return IgnoreRule(
        regex=re.compile(prefix + body + "$"),
        negated=negated,
        dir_only=dir_only,
        source=source,
    )


class GitIgnore:
    """Rules from one ignore file, relative to the directory *base*.

    *base* is a POSIX path relative to the scan root ('' for the root).
    """

    def __init__(self, base: str = "", rules: Iterable[IgnoreRule] = ()) -> None:
        self.base = base
        self._rules: List[IgnoreRule] = list(rules)

    def __len__(self) -> int:
        return len(self._rules)

    @classmethod
    def from_lines(cls, lines: Iterable[str], base: str = "", name: str = ".gitignore") -> "GitIgnore":
        rules = []
        for line_no, raw in enumerate(lines, 1):
            rule = parse_rule(raw, f"{name}:{line_no}")
            if rule is not None:
                rules.append(rule)
        return cls(base, rules)

    @classmethod
    def from_file(cls, path: Path, base: str = "") -> "GitIgnore":
        """Load an ignore file; a missing or unreadable file has no rules."""
        if not path.is_file():
            return cls(base)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.debug("Cannot read %s: %s", path, exc)
            return cls(base)
        name = f"{base}/{path.name}" if base else path.name
        return cls.from_lines(text.splitlines(), base, name)

    def match(self, rel_path: str, is_dir: bool) -> Optional[bool]:
        """Return True (ignored), False (re-included) or None (no rule applies)."""
        local = rel_path
        if self.base:
            if not rel_path.startswith(self.base + "/"):
                return None
            local = rel_path[len(self.base) + 1:]
        for rule in reversed(self._rules):
            if rule.dir_only and not is_dir:
                continue
            if rule.regex.match(local):
                logger.debug(
                    "%s %s (%s)", "Re-included" if rule.negated else "Ignored", rel_path, rule.source
                )
                return not rule.negated
        return None


def is_ignored(stack: Sequence[GitIgnore], rel_path: str, is_dir: bool) -> bool:
    """Evaluate *rel_path* against ignore files ordered shallow to deep."""
    ignored = False
    for ignore in stack:
        verdict = ignore.match(rel_path, is_dir)
        if verdict is not None:
            ignored = verdict
    return ignored
