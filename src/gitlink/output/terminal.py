"""Rich terminal reporter — findings table and run summary."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from gitlink.findings.models import DetectorKind, Finding, ScanResult
from gitlink.findings.redactor import redact_value

_DETECTOR_STYLE = {
    DetectorKind.PATTERN: "bold cyan",
    DetectorKind.ENTROPY: "bold yellow",
}


def _location(finding: Finding) -> str:
    return f"{finding.line}:{finding.column}"


def _origin(finding: Finding) -> Text:
    if finding.commit:
        return Text(finding.commit[:8], style="blue")
    return Text("working", style="dim")


def render(
    result: ScanResult,
    *,
    show_secrets: bool = False,
    show_summary: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print scan results to the terminal using Rich."""
    console = console or Console(stderr=True)

    if not result.findings:
        console.print()
        console.print("[bold green]✅ No secrets detected.[/bold green]")
        if show_summary:
            _print_summary(console, result)
        return

    console.print()
    table = Table(
        title="GitLink Findings",
        show_lines=True,
        title_style="bold",
        border_style="dim",
    )
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Type", min_width=18)
    table.add_column("File", style="magenta")
    table.add_column("Line", justify="right", style="green")
    table.add_column("Commit", no_wrap=True)
    table.add_column("Match", min_width=15)

    for finding in result.findings:
        value = finding.value if show_secrets else redact_value(finding.value)
        table.add_row(
            Text(finding.short_id),
            Text(finding.secret_type, style=_DETECTOR_STYLE.get(finding.detector, "")),
            Text(finding.file),
            _location(finding),
            _origin(finding),
            Text(value),
        )

    console.print(table)

    if show_summary:
        _print_summary(console, result)

    console.print()
    console.print(
        f"[bold red]❌ {result.total_findings} potential secret(s) found.[/bold red] "
        "Run [bold]gitlink ignore add <FINGERPRINT>[/bold] to silence a false positive."
    )


def _print_summary(console: Console, result: ScanResult) -> None:
    console.print()
    console.print(f"[dim]Files scanned:[/dim]   {result.scanned_files}")
    if result.commits_scanned:
        console.print(f"[dim]Commits scanned:[/dim] {result.commits_scanned}")
    console.print(f"[dim]Findings:[/dim]        {result.total_findings}")
    console.print(f"[dim]Ignored:[/dim]         {result.ignored}")
    console.print(f"[dim]Skipped:[/dim]         {len(result.skipped_files)}")
    console.print(f"[dim]Duration:[/dim]        {result.scan_duration_ms:.0f}ms")
