"""Orchestration components for CI Code Reviewer."""

from ci_reviewer.orchestrator.aggregator import ResultAggregator, derive_verdict
from ci_reviewer.orchestrator.context import extract_context, extract_file_context
from ci_reviewer.orchestrator.reconciler import ReviewDelta, compute_delta, reconcile
from ci_reviewer.orchestrator.scheduler import BatchScheduler
from ci_reviewer.orchestrator.strategy import ReviewStrategy, change_percent, select_strategy

__all__ = [
    "BatchScheduler",
    "ResultAggregator",
    "ReviewDelta",
    "ReviewStrategy",
    "change_percent",
    "compute_delta",
    "derive_verdict",
    "extract_context",
    "extract_file_context",
    "reconcile",
    "select_strategy",
]
