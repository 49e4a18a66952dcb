"""Secret value redaction for safe output."""

from __future__ import annotations

from gitlink.findings.models import Finding


def redact_value(value: str) -> str:
    """Partial reveal: first 4 + last 2 chars.

    Example: ``ghp_Abc123xyz9`` → ``ghp_...z9``
    """
    if len(value) <= 6:
        return "[REDACTED]"
    return f"{value[:4]}...{value[-2:]}"


def redact_line(finding: Finding) -> str:
    """Return the finding's source line with every copy of its value masked."""
    if not finding.value:
        return finding.content
    return finding.content.replace(finding.value, redact_value(finding.value))
