"""Shannon entropy calculator and candidate extraction."""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import List, Tuple

# Candidates are maximal runs of base64/base64url-ish characters
_TOKEN_RE = re.compile(r"[A-Za-z0-9_/+\-]+")
# Identifier-shaped tokens (snake_case words) are never secrets
_IDENTIFIER_RE = re.compile(r"[a-z_]+")


def shannon_entropy(s: str) -> float:
    """Compute Shannon entropy (bits per character) of string *s*.

    H = -Σ p(c) · log₂(p(c))  over unique characters c.
    """
    if not s:
        return 0.0
    counts = Counter(s)
    total = len(s)
    return -sum((c / total) * math.log2(c / total) for c in counts.values())


def extract_candidates(line: str, min_length: int = 20) -> List[Tuple[str, int]]:
    """Return ``(token, start_offset)`` pairs worth scoring from *line*.

    Tokens shorter than *min_length* and tokens made only of lowercase letters
    and underscores are dropped.
    """
    candidates: List[Tuple[str, int]] = []
    for m in _TOKEN_RE.finditer(line):
        tok = m.group(0)
        if len(tok) < min_length:
            continue
        if _IDENTIFIER_RE.fullmatch(tok):
            continue
        candidates.append((tok, m.start()))
    return candidates


def find_high_entropy(
    line: str,
    min_entropy: float = 4.5,
    min_length: int = 20,
) -> List[Tuple[str, int, float]]:
    """Return ``(candidate, start_offset, entropy)`` triples above thresholds."""
    results: List[Tuple[str, int, float]] = []
    for candidate, start in extract_candidates(line, min_length):
        h = shannon_entropy(candidate)
        if h >= min_entropy:
            results.append((candidate, start, h))
    return results
