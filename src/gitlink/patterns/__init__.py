"""Secret patterns — model, registry, built-in signatures."""

from gitlink.patterns.models import PatternError, SecretPattern
from gitlink.patterns.registry import PatternRegistry, build_registry

__all__ = ["PatternError", "PatternRegistry", "SecretPattern", "build_registry"]
