"""GitLink CLI — Typer application with scan, ignore and init commands."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from gitlink import __version__
from gitlink.config.schema import GitLinkConfig
from gitlink.findings.models import Finding, ScanResult
from gitlink.patterns.registry import PatternRegistry

app = typer.Typer(
    name="gitlink",
    help="Find secrets in your working tree and git history.",
    add_completion=False,
    no_args_is_help=True,
)
ignore_app = typer.Typer(help="Manage ignored findings (.gitlinkignore.json).", no_args_is_help=True)
app.add_typer(ignore_app, name="ignore")

console = Console(stderr=True)
logger = logging.getLogger("gitlink")


def _setup_logging(verbose: bool = False, debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    handler = RichHandler(console=console, show_path=debug, show_time=debug)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(level)


def _resolve_root(path: Path) -> Path:
    root = path.resolve()
    if not root.is_dir():
        console.print(f"[bold red]Error:[/bold red] not a directory: {escape(str(path))}")
        raise typer.Exit(code=2)
    return root


def _load(root: Path, config: Optional[str]) -> tuple[GitLinkConfig, PatternRegistry]:
    """Load config and pattern registry, exit 2 on failure."""
    from gitlink.config.loader import ConfigError, load_config
    from gitlink.patterns.models import PatternError
    from gitlink.patterns.registry import build_registry

    try:
        cfg = load_config(root, config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    try:
        registry = build_registry(cfg, root)
    except PatternError as exc:
        console.print(f"[bold red]Pattern error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    logger.info("Patterns loaded: %d", len(registry))
    return cfg, registry


def _collect(
    root: Path,
    cfg: GitLinkConfig,
    registry: PatternRegistry,
    *,
    history: bool,
    since_days: Optional[int],
) -> ScanResult:
    """Run the working-tree scan and, if asked, the history scan. Unfiltered."""
    from gitlink.scanner.history import run_history_scan
    from gitlink.scanner.worktree import ScanError, run_working_tree_scan

    start = time.perf_counter()
    try:
        tree = run_working_tree_scan(root, registry, cfg)
    except ScanError as exc:
        console.print(f"[bold red]Scanner error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    result = ScanResult(
        findings=sorted(tree.findings, key=lambda f: (f.file, f.line, f.column, f.secret_type)),
        skipped_files=sorted(tree.skipped_files),
        scanned_files=tree.scanned_files,
    )
    if history:
        hist = run_history_scan(root, registry, cfg, since_days)
        result.findings.extend(hist.findings)
        result.commits_scanned = hist.commits_scanned
    result.scan_duration_ms = (time.perf_counter() - start) * 1000
    return result


# ── scan ──────────────────────────────────────────────────────────────────────


@app.command()
def scan(
    path: Path = typer.Argument(Path("."), help="Project root to scan"),
    history: bool = typer.Option(False, "--history", help="Also scan commits reachable from HEAD"),
    since_days: Optional[int] = typer.Option(
        None, "--since-days", min=0, help="Only scan commits from the last N days"
    ),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write JSON report to file"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitlink.toml"),
    show_ignored: bool = typer.Option(False, "--show-ignored", help="Also report ignored findings"),
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Print matched values unredacted"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """Scan the working tree (and optionally history) for secrets."""
    from gitlink.output import json_report, terminal
    from gitlink.store import IgnoreStore

    _setup_logging(verbose, debug)
    root = _resolve_root(path)
    cfg, registry = _load(root, config)

    if format:
        if format not in ("terminal", "json"):
            console.print(f"[bold red]Invalid format:[/bold red] {escape(format)}")
            raise typer.Exit(code=2)
        cfg.output.format = format  # type: ignore[assignment]

    include_history = history or cfg.history.enabled or since_days is not None
    result = _collect(root, cfg, registry, history=include_history, since_days=since_days)

    db = IgnoreStore(root).load()
    kept = db.filter(result.findings)
    result.ignored = len(result.findings) - len(kept)
    remaining = len(kept)
    if not show_ignored:
        result.findings = kept
    logger.info("%d finding(s), %d ignored", remaining + result.ignored, result.ignored)

    report_text: Optional[str] = None
    if cfg.output.format == "json":
        report_text = json_report.render(result, show_secrets=show_secrets)
        print(report_text)
    else:
        terminal.render(result, show_secrets=show_secrets, show_summary=cfg.output.show_summary)

    if output:
        report_text = report_text or json_report.render(result, show_secrets=show_secrets)
        Path(output).write_text(report_text, encoding="utf-8")
        logger.info("Report written to %s", output)

    raise typer.Exit(code=1 if remaining else 0)


# ── ignore ────────────────────────────────────────────────────────────────────


def _tag(short_id: str) -> str:
    return escape(f"[{short_id}]")


def _describe(finding: Finding) -> str:
    origin = f"commit {finding.commit[:8]}" if finding.commit else "working"
    return f"{finding.secret_type} in {finding.file}:{finding.line} ({origin})"


@ignore_app.command("list")
def ignore_list(
    path: Path = typer.Argument(Path("."), help="Project root"),
) -> None:
    """List ignored findings."""
    from gitlink.store import IgnoreSource, IgnoreStore

    _setup_logging()
    db = IgnoreStore(_resolve_root(path)).load()
    if not len(db):
        console.print("[dim]No ignored findings.[/dim]")
        return
    console.print(f"[bold]Ignored findings ({len(db)}):[/bold]")
    for item in db:
        if item.source == IgnoreSource.HISTORY:
            origin = f"commit {item.commit[:8]}" if item.commit else "history"
        else:
            origin = "working"
        console.print(f"  [cyan]{_tag(item.short_id)}[/cyan] {escape(item.variable)} [dim]({origin})[/dim]")


@ignore_app.command("add")
def ignore_add(
    fingerprint: str = typer.Argument(..., help="Fingerprint (or short id) of a current finding"),
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project root"),
    history: bool = typer.Option(False, "--history", help="Search history findings too"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitlink.toml"),
) -> None:
    """Ignore a current finding by fingerprint."""
    from gitlink.store import IgnoredItem, IgnoreStore

    _setup_logging()
    root = _resolve_root(path)
    cfg, registry = _load(root, config)
    result = _collect(root, cfg, registry, history=history, since_days=None)

    key = fingerprint.strip().lower()
    matches = [f for f in result.findings if f.fingerprint.startswith(key)] if key else []
    if not matches:
        console.print(f"[red]✗[/red] No current finding matches {escape(fingerprint)}")
        raise typer.Exit(code=1)
    if len({f.fingerprint for f in matches}) > 1:
        console.print(f"[red]✗[/red] {escape(fingerprint)} is ambiguous; use a longer prefix")
        raise typer.Exit(code=1)

    finding = matches[0]
    if IgnoreStore(root).add(IgnoredItem.from_finding(finding)):
        console.print(f"[green]✓[/green] Ignored {_tag(finding.short_id)} {escape(_describe(finding))}")
    else:
        console.print(f"[yellow]⚠[/yellow]  {_tag(finding.short_id)} is already ignored")


@ignore_app.command("remove")
def ignore_remove(
    short_id: str = typer.Argument(..., help="Short id shown by 'gitlink ignore list'"),
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project root"),
) -> None:
    """Stop ignoring a finding."""
    from gitlink.store import IgnoreStore

    _setup_logging()
    if IgnoreStore(_resolve_root(path)).remove_by_short_id(short_id):
        console.print(f"[green]✓[/green] Removed {_tag(short_id)}")
    else:
        console.print(f"[red]✗[/red] Short id {_tag(short_id)} not found")
        raise typer.Exit(code=1)


@ignore_app.command("clear")
def ignore_clear(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project root"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every ignored finding."""
    from gitlink.store import IgnoreStore

    _setup_logging()
    root = _resolve_root(path)
    if not yes and not typer.confirm("Clear all ignored findings?"):
        raise typer.Exit(code=1)
    IgnoreStore(root).clear()
    console.print("[green]✓[/green] All ignored findings cleared")


def _parse_selection(answer: str, count: int) -> List[int]:
    """Parse '1,3-4' into zero-based indexes; raise ValueError on bad input."""
    picked: List[int] = []
    for part in answer.replace(" ", "").split(","):
        if not part:
            continue
        lo, _, hi = part.partition("-")
        first, last = int(lo), int(hi or lo)
        if first < 1 or last > count or first > last:
            raise ValueError(part)
        picked.extend(range(first - 1, last))
    return sorted(set(picked))


@ignore_app.command("manage")
def ignore_manage(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project root"),
    history: bool = typer.Option(False, "--history", help="Include history findings"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .gitlink.toml"),
) -> None:
    """Interactively pick current findings to ignore."""
    from gitlink.findings.redactor import redact_value
    from gitlink.store import IgnoredItem, IgnoreStore

    _setup_logging()
    root = _resolve_root(path)
    cfg, registry = _load(root, config)
    store = IgnoreStore(root)
    db = store.load()
    findings = db.filter(
        _collect(root, cfg, registry, history=history, since_days=None).findings
    )
    if not findings:
        console.print("[bold green]✅ Nothing to manage — no unignored findings.[/bold green]")
        return

    for idx, finding in enumerate(findings, 1):
        console.print(
            f"  [bold]{idx:>3}[/bold]  [cyan]{_tag(finding.short_id)}[/cyan] "
            f"{escape(_describe(finding))}  {escape(redact_value(finding.value))}"
        )

    answer = typer.prompt("Findings to ignore (e.g. 1,3-4; empty to cancel)", default="", show_default=False)
    try:
        picked = _parse_selection(answer, len(findings))
    except ValueError:
        console.print(f"[red]✗[/red] Invalid selection: {escape(answer)}")
        raise typer.Exit(code=2)
    if not picked:
        console.print("[dim]Nothing ignored.[/dim]")
        return

    added = sum(db.add(IgnoredItem.from_finding(findings[i])) for i in picked)
    store.save(db)
    console.print(f"[green]✓[/green] Ignored {added} finding(s)")


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    path: Path = typer.Argument(Path("."), help="Project root"),
) -> None:
    """Generate a starter .gitlink.toml in the project root."""
    from gitlink.config.defaults import DEFAULT_TOML
    from gitlink.config.loader import CONFIG_FILENAME

    config_path = _resolve_root(path) / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"gitlink {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """GitLink — find secrets in your working tree and git history."""
