"""JSON reporter for scripts and CI pipelines."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from gitlink import __version__
from gitlink.findings.models import ScanResult
from gitlink.findings.redactor import redact_line


def to_dict(result: ScanResult, *, show_secrets: bool = False) -> Dict[str, Any]:
    """Convert ScanResult to a JSON-serialisable dict."""
    findings_list: List[Dict[str, Any]] = []
    for f in result.findings:
        findings_list.append({
            "secret_type": f.secret_type,
            "file": f.file,
            "line": f.line,
            "column": f.column,
            "content": f.content if show_secrets else redact_line(f),
            "fingerprint": f.fingerprint,
            "short_id": f.short_id,
            "commit": f.commit,
            "detector": f.detector.value,
        })

    return {
        "version": __version__,
        "scanned_files": result.scanned_files,
        "commits_scanned": result.commits_scanned,
        "total_findings": result.total_findings,
        "ignored": result.ignored,
        "findings": findings_list,
        "skipped_files": result.skipped_files,
        "scan_duration_ms": round(result.scan_duration_ms, 2),
    }


def render(result: ScanResult, *, show_secrets: bool = False) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result, show_secrets=show_secrets), indent=2)
