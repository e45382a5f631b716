"""Main review flow: resolve changes, review in batches, reconcile, persist.

Run order:
1. Prune expired cache records.
2. Resolve the change set (git diff strategies, full-scan fallback).
3. Review each file in rate-limited batches; cached content skips the oracle.
4. Aggregate severities into a verdict.
5. Reconcile against the previous run's snapshot: new, still-open and fixed issues.
6. Update cumulative analytics and write the result artifact and snapshot.

Only critical findings fail the pipeline; see ``exit_code``.
"""

import logging
from pathlib import Path

from ci_reviewer.config import Config, ConfigError
from ci_reviewer.models.review import ReviewRunResult
from ci_reviewer.oracle.client import OracleClient, OracleConfig
from ci_reviewer.oracle.reviewer import FileReviewer
from ci_reviewer.orchestrator.aggregator import ResultAggregator
from ci_reviewer.orchestrator.reconciler import compute_delta
from ci_reviewer.orchestrator.scheduler import BatchScheduler, SchedulerConfig
from ci_reviewer.storage.analytics import AnalyticsTracker
from ci_reviewer.storage.artifacts import load_previous, write_previous, write_result
from ci_reviewer.storage.cache import ReviewCache
from ci_reviewer.vcs.changes import ChangeSetResolver

logger = logging.getLogger(__name__)


def exit_code(result: ReviewRunResult) -> int:
    """Non-zero exactly when the run has a critical finding."""
    return 1 if result.has_critical_issues else 0


def build_cache(config: Config, root: Path) -> ReviewCache | None:
    if not config.cache.enabled:
        return None
    return ReviewCache(root / config.cache.directory, max_age_days=config.cache.max_age_days)


async def run_review(
    config: Config,
    client: OracleClient | None = None,
    resolver: ChangeSetResolver | None = None,
    root: str | Path = ".",
    scheduler: BatchScheduler | None = None,
) -> ReviewRunResult:
    """Run one full review pipeline.

    Args:
        config: Loaded configuration
        client: Oracle client (created from config and closed here if omitted)
        resolver: Change-set resolver (created from config if omitted)
        root: Repository root; relative paths in config resolve against it
        scheduler: Batch scheduler (created from config if omitted)

    Returns:
        The persisted run result

    Raises:
        ConfigError: If no oracle client can be built
    """
    root = Path(root)
    if client is None and not config.oracle.api_key:
        raise ConfigError("Missing Anthropic API key (set ANTHROPIC_API_KEY or oracle.api_key)")

    cache = build_cache(config, root)
    if cache is not None:
        cache.evict_older_than(config.cache.max_age_days)

    resolver = resolver or ChangeSetResolver(config.vcs, root)
    files = resolver.resolve()

    if not files:
        logger.info("No files to review")
        result = ReviewRunResult.empty(model=config.oracle.model)
        _persist(config, root, result)
        return result

    previous = load_previous(root / config.output.previous_path)
    scheduler = scheduler or BatchScheduler(
        config=SchedulerConfig(
            batch_size=config.scheduler.batch_size,
            pause_seconds=config.scheduler.pause_seconds,
            call_timeout_seconds=config.scheduler.call_timeout_seconds,
        )
    )

    owns_client = client is None
    if client is None:
        client = OracleClient(
            OracleConfig(
                api_key=config.oracle.api_key,
                model=config.oracle.model,
                base_url=config.oracle.base_url,
                timeout=config.oracle.timeout_seconds,
            )
        )

    logger.info(f"Reviewing {len(files)} file(s) in batches of {scheduler.config.batch_size}")
    try:
        reviewer = FileReviewer(
            client,
            cache=cache,
            changed_lines=resolver.changed_lines,
            root=root,
            context_radius=config.review.context_radius,
            framework=config.review.framework,
        )
        per_file = await scheduler.run(files, reviewer.review)
    finally:
        if owns_client:
            await client.close()

    result = ResultAggregator(model=config.oracle.model).aggregate(
        per_file, files_reviewed=len(files)
    )
    delta = compute_delta(result, previous)
    result.fixed_findings = delta.fixed_findings
    if not delta.is_first_run:
        result.new_issue_count = len(delta.new_findings)
        result.open_issue_count = len(delta.open_findings)

    _persist(config, root, result)
    return result


def _persist(config: Config, root: Path, result: ReviewRunResult) -> None:
    """Update analytics and write the artifact and next-run snapshot."""
    try:
        AnalyticsTracker(root / config.output.analytics_path).track(result)
    except OSError as e:
        logger.warning(f"Could not update analytics: {e}")

    write_result(root / config.output.results_path, result)
    write_previous(root / config.output.previous_path, result)
    logger.info(f"Detailed results saved to {config.output.results_path}")
