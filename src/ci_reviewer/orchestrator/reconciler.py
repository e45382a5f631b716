"""Cross-run reconciliation of findings.

A finding's identity across runs is ``(file, line, category)``. Free-text
fields are left out because the oracle phrases the same issue differently
each time. This is a heuristic: inserting lines above a finding shifts its
line number, so it shows up as one fixed finding plus one new finding.
"""

import logging
from dataclasses import dataclass, field

from ci_reviewer.models.findings import Category, Finding, FixedFinding
from ci_reviewer.models.review import ReviewRunResult

logger = logging.getLogger(__name__)

FindingKey = tuple[str, int, Category]


@dataclass
class ReviewDelta:
    """Tracks changes between review runs."""

    new_findings: list[tuple[str, Finding]] = field(default_factory=list)
    open_findings: list[tuple[str, Finding]] = field(default_factory=list)
    fixed_findings: list[FixedFinding] = field(default_factory=list)
    is_first_run: bool = False


def finding_key(file_path: str, finding: Finding) -> FindingKey:
    return (file_path, finding.line, finding.category)


def compute_delta(
    current: ReviewRunResult | dict[str, list[Finding]],
    previous: ReviewRunResult | None,
) -> ReviewDelta:
    """Compare current findings with the previous run.

    Args:
        current: This run's result, or its per-file findings
        previous: The previous run's snapshot, None on a first run

    Returns:
        ReviewDelta showing new, open and fixed findings
    """
    per_file = current.per_file_findings if isinstance(current, ReviewRunResult) else current
    delta = ReviewDelta(is_first_run=previous is None)

    previous_keys: set[FindingKey] = set()
    if previous is not None:
        previous_keys = {finding_key(path, f) for path, f in previous.iter_findings()}

    current_keys: set[FindingKey] = set()
    for path, findings in per_file.items():
        for finding in findings:
            key = finding_key(path, finding)
            current_keys.add(key)
            if key in previous_keys:
                delta.open_findings.append((path, finding))
            else:
                delta.new_findings.append((path, finding))

    if previous is not None:
        for path, finding in previous.iter_findings():
            if finding_key(path, finding) not in current_keys:
                delta.fixed_findings.append(
                    FixedFinding(
                        file_path=path,
                        line=finding.line,
                        category=finding.category,
                        severity=finding.severity,
                        issue=finding.issue,
                    )
                )

    logger.info(
        f"Review delta: {len(delta.new_findings)} new, "
        f"{len(delta.fixed_findings)} fixed, "
        f"{len(delta.open_findings)} open"
    )
    return delta


def reconcile(
    current: ReviewRunResult | dict[str, list[Finding]],
    previous: ReviewRunResult | None,
) -> list[FixedFinding]:
    """Return previous findings with no same-key finding in the current run."""
    return compute_delta(current, previous).fixed_findings
