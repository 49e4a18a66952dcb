"""Built-in patterns — vendor-specific first, the generic assignment last."""

from gitlink.patterns.builtin.aws import ALL_AWS_PATTERNS
from gitlink.patterns.builtin.keys import ALL_KEY_PATTERNS
from gitlink.patterns.builtin.tokens import ALL_VENDOR_TOKEN_PATTERNS, GENERIC_API_KEY
from gitlink.patterns.models import SecretPattern

ALL_BUILTIN_PATTERNS: list[SecretPattern] = [
    *ALL_AWS_PATTERNS,
    *ALL_VENDOR_TOKEN_PATTERNS,
    *ALL_KEY_PATTERNS,
    GENERIC_API_KEY,
]

__all__ = ["ALL_BUILTIN_PATTERNS"]
