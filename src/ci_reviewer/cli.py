"""Command-line interface for CI Code Reviewer."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ci_reviewer import __version__
from ci_reviewer.config import ConfigError, load_config, validate_config
from ci_reviewer.models.findings import Severity
from ci_reviewer.models.review import ReviewRunResult
from ci_reviewer.orchestrator.aggregator import ResultAggregator
from ci_reviewer.review import exit_code, run_review
from ci_reviewer.storage.analytics import AnalyticsTracker
from ci_reviewer.storage.cache import ReviewCache

console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load(config_path: str | None):
    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {e}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def cli(verbose: bool) -> None:
    """CI Code Reviewer - incremental, cache-aware AI code review."""
    setup_logging(verbose)


@cli.command("review")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
@click.option("--base-branch", help="Base branch to diff against (overrides GITHUB_BASE_REF)")
@click.option("--batch-size", type=int, help="Files reviewed concurrently per batch")
@click.option("--no-cache", is_flag=True, help="Ignore and don't write the review cache")
@click.option("--json", "as_json", is_flag=True, help="Print the result artifact as JSON")
def review(
    config_path: str | None,
    base_branch: str | None,
    batch_size: int | None,
    no_cache: bool,
    as_json: bool,
) -> None:
    """Review changed files and fail only on critical findings."""
    config = _load(config_path)
    if base_branch:
        config.vcs.base_branch = base_branch
    if batch_size is not None:
        config.scheduler.batch_size = batch_size
    if no_cache:
        config.cache.enabled = False

    errors = validate_config(config)
    if errors:
        for error in errors:
            console.print(f"[red]Config error:[/red] {error}")
        sys.exit(1)

    console.print("🚀 Starting AI code review...")
    result = asyncio.run(run_review(config))

    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_result(result)

    code = exit_code(result)
    if code:
        console.print("[red]❌ Code review failed - critical issues found[/red]")
    else:
        console.print("[green]✅ Code review passed[/green]")
    sys.exit(code)


def print_result(result: ReviewRunResult) -> None:
    """Print findings, fixed issues and a summary."""
    for file_path, findings in result.per_file_findings.items():
        if not findings:
            continue
        console.print(f"\n📄 [bold]{escape(file_path)}[/bold]")
        for finding in findings:
            style = SEVERITY_STYLES[finding.severity]
            console.print(
                f"  [{style}]{finding.severity.value}[/{style}] "
                f"line {finding.line} [dim]\\[{finding.category.value}][/dim]: {escape(finding.issue)}"
            )
            if finding.suggestion:
                console.print(f"    💡 {escape(finding.suggestion)}")

    if result.new_issue_count is not None:
        console.print(
            f"\n🆕 {result.new_issue_count} new, "
            f"{result.open_issue_count} still open since last run"
        )

    if result.fixed_findings:
        fixed_count = len(result.fixed_findings)
        console.print(f"\n[green]🎉 {fixed_count} issue(s) fixed since last run[/green]")
        for fixed in result.fixed_findings:
            console.print(
                f"  ✓ {fixed.file_path}:{fixed.line} [{fixed.category.value}] {fixed.issue}",
                markup=False,
            )

    console.print(f"\n{ResultAggregator.summarize(result)}")
    console.print(f"Verdict: [bold]{result.verdict.value}[/bold]")


@cli.group("cache")
def cache_group() -> None:
    """Review cache maintenance."""
    pass


@cache_group.command("clear")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def cache_clear(config_path: str | None) -> None:
    """Delete every cached review."""
    config = _load(config_path)
    cache = ReviewCache(config.cache.directory)
    if not cache.directory.exists():
        console.print("No cache to clear")
        return
    cleared = cache.clear()
    console.print(f"Cleared {cleared} cache file(s)")


@cache_group.command("prune")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
@click.option("--days", type=float, help="Maximum age in days (default: cache.max_age_days)")
def cache_prune(config_path: str | None, days: float | None) -> None:
    """Delete cached reviews older than the given age."""
    config = _load(config_path)
    cache = ReviewCache(config.cache.directory)
    cleared = cache.evict_older_than(days if days is not None else config.cache.max_age_days)
    console.print(f"Pruned {cleared} cache file(s)")


@cli.group("analytics")
def analytics_group() -> None:
    """Cross-run analytics."""
    pass


@analytics_group.command("show")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def analytics_show(config_path: str | None) -> None:
    """Show cumulative code quality insights."""
    config = _load(config_path)
    tracker = AnalyticsTracker(config.output.analytics_path)
    state = tracker.load()
    console.print(tracker.summarize(state), markup=False)
    console.print(f"Top category: {state.top_category or 'none'}")


@cli.group("config")
def config_group() -> None:
    """Configuration commands."""
    pass


@config_group.command("validate")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_validate(config_path: str | None) -> None:
    """Validate configuration and environment."""
    try:
        config = load_config(Path(config_path) if config_path else None)
        errors = validate_config(config)

        if errors:
            console.print("[red]Configuration is invalid:[/red]")
            for error in errors:
                console.print(f"  • {error}")
            sys.exit(1)
        else:
            console.print("[green]✓ Configuration is valid[/green]")
    except ConfigError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        sys.exit(1)


@config_group.command("show")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Config file path")
def config_show(config_path: str | None) -> None:
    """Show current configuration."""
    config = _load(config_path)

    console.print("\n[bold]Current Configuration[/bold]\n")

    table = Table(title="Settings")
    table.add_column("Setting")
    table.add_column("Value")

    table.add_row("Mode", "pull-request" if config.vcs.pull_request else "local")
    table.add_row("Base branch", config.vcs.base_branch or "-")
    table.add_row("Base/head", f"{config.vcs.base_sha or '-'} / {config.vcs.head_sha or '-'}")
    table.add_row("Source root", config.vcs.source_root)
    table.add_row("Extensions", ", ".join(config.vcs.extensions))
    table.add_row("Model", config.oracle.model)
    table.add_row("Batch size", str(config.scheduler.batch_size))
    table.add_row("Batch pause", f"{config.scheduler.pause_seconds}s")
    table.add_row("Cache", f"{config.cache.directory} ({config.cache.max_age_days} days)")

    console.print(table)
    console.print(f"\n[bold]API key:[/bold] {'set' if config.oracle.api_key else 'missing'}")


if __name__ == "__main__":
    cli()
