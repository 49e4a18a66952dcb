"""Per-line detection shared by the working-tree and history scanners.

Every registered pattern runs over the line, then the entropy heuristic runs
independently. Repeated matches of one value by one detector on one line are
reported once. With the ``collapse`` overlap policy a value span that already
produced a finding suppresses any later detector overlapping it (patterns run
in registry order, entropy last); with ``report`` every detector reports.
"""

from __future__ import annotations

from typing import List, Optional, Set, Tuple

from gitlink.config.schema import GitLinkConfig
from gitlink.findings.fingerprint import fingerprint
from gitlink.findings.models import HIGH_ENTROPY_SECRET, DetectorKind, Finding
from gitlink.patterns.registry import PatternRegistry
from gitlink.scanner.entropy import find_high_entropy

Span = Tuple[int, int]

# UTF-8 byte-order mark; dropped from a file's first line before matching
_BOM = "\ufeff"


def _overlaps(span: Span, taken: List[Span]) -> bool:
    start, end = span
    return any(start < t_end and t_start < end for t_start, t_end in taken)


def split_lines(text: str) -> List[str]:
    """Split *text* into lines the way git counts them.

    Only ``\\n`` ends a line; a trailing ``\\r`` is dropped, and a final
    newline does not open an extra empty line.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


class LineDetector:
    """Run patterns and the entropy heuristic over single lines.

    Holds no per-scan state, so one instance can serve every worker thread.
    """

    def __init__(self, registry: PatternRegistry, config: Optional[GitLinkConfig] = None) -> None:
        cfg = config or GitLinkConfig()
        self._registry = registry
        self._collapse = cfg.scan.overlap == "collapse"
        self._entropy = cfg.entropy
        self._fp_mode = cfg.fingerprint.mode

    def detect(
        self,
        file: str,
        line_no: int,
        line: str,
        commit: Optional[str] = None,
    ) -> List[Finding]:
        findings: List[Finding] = []
        seen: Set[Tuple[str, str]] = set()
        taken: List[Span] = []
        if line_no == 1 and line.startswith(_BOM):
            line = line[1:]
        content = line.rstrip()

        def emit(secret_type: str, column: int, value: str, span: Span, kind: DetectorKind) -> None:
            key = (secret_type, value)
            if key in seen:
                return
            if self._collapse and _overlaps(span, taken):
                return
            seen.add(key)
            taken.append(span)
            findings.append(
                Finding(
                    secret_type=secret_type,
                    file=file,
                    line=line_no,
                    column=column,
                    content=content,
                    fingerprint=fingerprint(
                        file, line_no, content, secret_type, mode=self._fp_mode
                    ),
                    commit=commit,
                    detector=kind,
                    value=value,
                )
            )

        for pattern in self._registry:
            for m in pattern.matcher.finditer(line):
                span = pattern.value_span(m)
                if span[0] == span[1]:
                    continue
                emit(pattern.name, m.start() + 1, line[span[0]:span[1]], span, DetectorKind.PATTERN)

        if self._entropy.enabled:
            hits = find_high_entropy(line, self._entropy.min_entropy, self._entropy.min_length)
            for token, start, _entropy in hits:
                span = (start, start + len(token))
                emit(HIGH_ENTROPY_SECRET, start + 1, token, span, DetectorKind.ENTROPY)

        return findings
