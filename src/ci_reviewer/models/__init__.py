"""Data models for CI Code Reviewer."""

from ci_reviewer.models.context import ReviewContext
from ci_reviewer.models.findings import Category, Finding, FixedFinding, Severity
from ci_reviewer.models.review import ReviewRunResult, Verdict

__all__ = [
    "Category",
    "Finding",
    "FixedFinding",
    "ReviewContext",
    "ReviewRunResult",
    "Severity",
    "Verdict",
]
