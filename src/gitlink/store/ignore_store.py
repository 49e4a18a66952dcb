"""Persistent ignore database — ``.gitlinkignore.json`` in the project root.

File format::

    {
      "ignored": [
        {
          "fingerprint": "<sha256 hex>",
          "short_id": "<first 8 hex>",
          "variable": "api_key",
          "source": "working" | "history",
          "commit": "<commit id>" | null
        }
      ]
    }

A missing or malformed file reads as an empty database. There is no
locking: two processes saving at once race and the last write wins.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

from gitlink.findings.models import Finding

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".gitlinkignore.json"
_GITIGNORE_HEADER = "# gitlink ignore database"

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class IgnoreSource(str, Enum):
    WORKING = "working"
    HISTORY = "history"


def extract_variable(content: str) -> str:
    """Best-effort variable name: last identifier left of the first ``=``."""
    lhs, sep, _ = content.partition("=")
    if not sep:
        return "unknown"
    names = _IDENTIFIER_RE.findall(lhs)
    return names[-1] if names else "unknown"


@dataclass(frozen=True)
class IgnoredItem:
    fingerprint: str
    short_id: str
    variable: str
    source: IgnoreSource = IgnoreSource.WORKING
    commit: Optional[str] = None

    @classmethod
    def from_finding(cls, finding: Finding) -> "IgnoredItem":
        return cls(
            fingerprint=finding.fingerprint,
            short_id=finding.short_id,
            variable=extract_variable(finding.content),
            source=IgnoreSource.HISTORY if finding.from_history else IgnoreSource.WORKING,
            commit=finding.commit,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "IgnoredItem":
        fp = data["fingerprint"]
        if not isinstance(fp, str) or not fp:
            raise ValueError("fingerprint must be a non-empty string")
        commit = data.get("commit")
        return cls(
            fingerprint=fp,
            short_id=str(data.get("short_id") or fp[:8]),
            variable=str(data.get("variable") or "unknown"),
            source=IgnoreSource(data.get("source", IgnoreSource.WORKING.value)),
            commit=str(commit) if commit else None,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["source"] = self.source.value
        return data


@dataclass
class IgnoreDatabase:
    """Ordered set of ignored items, unique per fingerprint."""

    items: List[IgnoredItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[IgnoredItem]:
        return iter(self.items)

    @property
    def fingerprints(self) -> Set[str]:
        return {item.fingerprint for item in self.items}

    def contains(self, fingerprint: str) -> bool:
        return any(item.fingerprint == fingerprint for item in self.items)

    def add(self, item: IgnoredItem) -> bool:
        """Append *item*; return False if its fingerprint is already present."""
        if self.contains(item.fingerprint):
            return False
        self.items.append(item)
        return True

    def remove_by_short_id(self, short_id: str) -> bool:
        """Remove the first item with *short_id*; return whether one was found."""
        for idx, item in enumerate(self.items):
            if item.short_id == short_id:
                del self.items[idx]
                return True
        return False

    def clear(self) -> None:
        self.items.clear()

    def filter(self, findings: Iterable[Finding]) -> List[Finding]:
        """Return the findings whose fingerprint is not ignored."""
        ignored = self.fingerprints
        return [f for f in findings if f.fingerprint not in ignored]

    def to_json(self) -> str:
        return json.dumps({"ignored": [item.to_dict() for item in self.items]}, indent=2)


def ensure_gitignore_entry(root: Path) -> bool:
    """Make sure ``<root>/.gitignore`` lists the ignore database.

    Returns True if the entry was appended.
    """
    gitignore = Path(root) / ".gitignore"
    existing = ""
    if gitignore.is_file():
        existing = gitignore.read_text(encoding="utf-8", errors="replace")
    if any(line.strip() == IGNORE_FILENAME for line in existing.splitlines()):
        return False
    with open(gitignore, "a", encoding="utf-8") as fh:
        fh.write(f"\n{_GITIGNORE_HEADER}\n{IGNORE_FILENAME}\n")
    logger.info("Added %s to %s", IGNORE_FILENAME, gitignore)
    return True


class IgnoreStore:
    """Load and save the ignore database of the project at *root*.

    Each mutator is one load, modify and save unit of work.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.path = self.root / IGNORE_FILENAME

    def load(self) -> IgnoreDatabase:
        if not self.path.is_file():
            return IgnoreDatabase()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            entries = raw["ignored"]
            if not isinstance(entries, list):
                raise TypeError("'ignored' must be a list")
            items = [IgnoredItem.from_dict(entry) for entry in entries]
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read %s (%s); treating it as empty", self.path, exc)
            return IgnoreDatabase()
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Malformed %s (%s); treating it as empty", self.path, exc)
            return IgnoreDatabase()

        db = IgnoreDatabase()
        for item in items:
            db.add(item)
        return db

    def save(self, db: IgnoreDatabase) -> None:
        """Write *db* and keep the database file out of version control."""
        self.path.write_text(db.to_json() + "\n", encoding="utf-8")
        ensure_gitignore_entry(self.root)

    def add(self, item: IgnoredItem) -> bool:
        db = self.load()
        added = db.add(item)
        if added:
            self.save(db)
        return added

    def remove_by_short_id(self, short_id: str) -> bool:
        db = self.load()
        removed = db.remove_by_short_id(short_id)
        if removed:
            self.save(db)
        return removed

    def clear(self) -> None:
        db = self.load()
        db.clear()
        self.save(db)
