"""Ignore store — user-suppressed fingerprints persisted per project."""

from gitlink.store.ignore_store import (
    IGNORE_FILENAME,
    IgnoreDatabase,
    IgnoredItem,
    IgnoreSource,
    IgnoreStore,
    ensure_gitignore_entry,
    extract_variable,
)

__all__ = [
    "IGNORE_FILENAME",
    "IgnoreDatabase",
    "IgnoreSource",
    "IgnoreStore",
    "IgnoredItem",
    "ensure_gitignore_entry",
    "extract_variable",
]
