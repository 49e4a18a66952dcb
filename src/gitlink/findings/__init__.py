"""Finding models, fingerprinting, and redaction."""

from gitlink.findings.fingerprint import fingerprint, short_id
from gitlink.findings.models import HIGH_ENTROPY_SECRET, DetectorKind, Finding, ScanResult
from gitlink.findings.redactor import redact_line, redact_value

__all__ = [
    "DetectorKind",
    "Finding",
    "HIGH_ENTROPY_SECRET",
    "ScanResult",
    "fingerprint",
    "redact_line",
    "redact_value",
    "short_id",
]
