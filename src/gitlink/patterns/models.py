"""Secret pattern data model — compiled once at construction."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Tuple


class PatternError(Exception):
    """Raised when a pattern definition is invalid."""


@dataclass(frozen=True)
class SecretPattern:
    """A named secret signature.

    ``pattern`` is kept as a raw string so custom patterns stay serialisable.
    If it defines a named group ``secret``, that group is the matched value;
    otherwise the whole match is.
    """

    id: str
    name: str
    pattern: str
    description: str = ""

    matcher: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
        except re.error as exc:
            raise PatternError(f"Pattern {self.id} does not compile: {exc}") from exc
        object.__setattr__(self, "matcher", compiled)

    def value_span(self, match: re.Match[str]) -> Tuple[int, int]:
        """Return the (start, end) offsets of the secret value inside *match*."""
        if "secret" in self.matcher.groupindex and match.group("secret") is not None:
            return match.span("secret")
        return match.span()
