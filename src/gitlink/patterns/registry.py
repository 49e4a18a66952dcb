"""Pattern registry — built-in and custom patterns, filtered by config."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

import yaml

from gitlink.config.schema import GitLinkConfig
from gitlink.patterns.models import PatternError, SecretPattern

logger = logging.getLogger(__name__)

CUSTOM_PATTERNS_DIR = ".gitlink-patterns"


class PatternRegistry:
    """Ordered, read-only collection of secret patterns.

    Order does not change which patterns run (all of them run over every
    line), only the order findings come out in and which detector wins when
    overlapping matches are collapsed.
    """

    def __init__(self, patterns: Iterable[SecretPattern] = ()) -> None:
        ordered: List[SecretPattern] = []
        seen: dict[str, int] = {}
        for p in patterns:
            # A later definition with the same id replaces the earlier one in place
            if p.id in seen:
                ordered[seen[p.id]] = p
            else:
                seen[p.id] = len(ordered)
                ordered.append(p)
        self._patterns: Tuple[SecretPattern, ...] = tuple(ordered)

    def __iter__(self) -> Iterator[SecretPattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"PatternRegistry({[p.id for p in self._patterns]!r})"

    @property
    def names(self) -> List[str]:
        return [p.name for p in self._patterns]

    def get(self, pattern_id: str) -> Optional[SecretPattern]:
        for p in self._patterns:
            if p.id == pattern_id:
                return p
        return None

    def extend(self, patterns: Iterable[SecretPattern]) -> "PatternRegistry":
        return PatternRegistry([*self._patterns, *patterns])

    def filtered(
        self,
        enable: Iterable[str] = (),
        disable: Iterable[str] = (),
    ) -> "PatternRegistry":
        """Return a registry restricted by an enable-list and a disable-list.

        An empty enable-list keeps everything; the disable-list always wins.
        """
        enable_set = set(enable)
        disable_set = set(disable)
        return PatternRegistry(
            p
            for p in self._patterns
            if (not enable_set or p.id in enable_set) and p.id not in disable_set
        )


def load_custom_patterns(directory: Path) -> List[SecretPattern]:
    """Load YAML pattern files from *directory*, in filename order."""
    if not directory.is_dir():
        return []
    patterns: List[SecretPattern] = []
    for path in sorted(directory.iterdir()):
        if path.suffix in (".yaml", ".yml"):
            patterns.extend(_load_yaml_patterns(path))
    return patterns


def _load_yaml_patterns(path: Path) -> List[SecretPattern]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise PatternError(f"Failed to read {path}: {exc}") from exc
    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]
    patterns: List[SecretPattern] = []
    for entry in data:
        if not isinstance(entry, dict) or "id" not in entry or "pattern" not in entry:
            raise PatternError(f"{path}: every pattern needs an 'id' and a 'pattern'")
        patterns.append(
            SecretPattern(
                id=str(entry["id"]),
                name=str(entry.get("name", entry["id"])),
                pattern=str(entry["pattern"]),
                description=str(entry.get("description", "")),
            )
        )
    logger.debug("Loaded %d custom pattern(s) from %s", len(patterns), path)
    return patterns


def build_registry(config: GitLinkConfig, repo_root: Path) -> PatternRegistry:
    """Create a fully populated, config-filtered pattern registry."""
    from gitlink.patterns.builtin import ALL_BUILTIN_PATTERNS

    custom = load_custom_patterns(repo_root / CUSTOM_PATTERNS_DIR)
    overridden = {p.id for p in custom}

    # Custom patterns go ahead of the generic catch-all so they win overlaps
    builtin = [
        p for p in ALL_BUILTIN_PATTERNS
        if p.id not in overridden and p.id != "GENERIC_API_KEY"
    ]
    generic = [
        p for p in ALL_BUILTIN_PATTERNS
        if p.id not in overridden and p.id == "GENERIC_API_KEY"
    ]

    registry = PatternRegistry([*builtin, *custom, *generic]).filtered(
        config.patterns.enable, config.patterns.disable
    )
    logger.debug("Pattern registry: %d pattern(s)", len(registry))
    return registry
