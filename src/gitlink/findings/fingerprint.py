"""Stable finding identity.

A fingerprint is SHA-256 over the file path, the decimal line number, the
source line and the secret type, in that order, with no separators and no
salt. The ignore store matches on it, so it must never change between runs.

``content`` mode leaves the line number out, which keeps a fingerprint stable
when unrelated edits shift the secret up or down the file.
"""

from __future__ import annotations

import hashlib

POSITIONAL = "positional"
CONTENT = "content"

SHORT_ID_LENGTH = 8


def fingerprint(
    file: str,
    line: int,
    content: str,
    secret_type: str,
    *,
    mode: str = POSITIONAL,
) -> str:
    hasher = hashlib.sha256()
    hasher.update(file.encode("utf-8"))
    if mode == POSITIONAL:
        hasher.update(str(line).encode("utf-8"))
    elif mode != CONTENT:
        raise ValueError(f"Unknown fingerprint mode: {mode!r}")
    hasher.update(content.encode("utf-8"))
    hasher.update(secret_type.encode("utf-8"))
    return hasher.hexdigest()


def short_id(fp: str) -> str:
    """First 8 hex characters; what users type to refer to a finding."""
    return fp[:SHORT_ID_LENGTH]
