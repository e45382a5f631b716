"""Result aggregator for combining per-file findings into a run result."""

import logging
from datetime import datetime, timezone

from ci_reviewer.models.findings import Finding, Severity
from ci_reviewer.models.review import ReviewRunResult, Verdict

logger = logging.getLogger(__name__)


def count_by_severity(per_file_findings: dict[str, list[Finding]]) -> dict[Severity, int]:
    """Count findings per severity tier across all files."""
    counts: dict[Severity, int] = dict.fromkeys(Severity, 0)
    for findings in per_file_findings.values():
        for finding in findings:
            counts[finding.severity] += 1
    return counts


def derive_verdict(severity_counts: dict[Severity, int]) -> Verdict:
    """Map severity counts to a verdict. Only critical findings block."""
    if severity_counts.get(Severity.CRITICAL, 0) > 0:
        return Verdict.CHANGES_REQUESTED
    if severity_counts.get(Severity.ERROR, 0) > 0:
        return Verdict.COMMENT
    return Verdict.APPROVED


class ResultAggregator:
    """Folds per-file findings into a single ReviewRunResult."""

    def __init__(self, model: str = "") -> None:
        """Initialize the aggregator.

        Args:
            model: Oracle model name recorded in the result
        """
        self.model = model

    def aggregate(
        self,
        per_file: list[tuple[str, list[Finding]]] | dict[str, list[Finding]],
        files_reviewed: int | None = None,
    ) -> ReviewRunResult:
        """Build the run result.

        Args:
            per_file: Findings per file, in review order
            files_reviewed: Number of files reviewed (defaults to len(per_file))

        Returns:
            Result with severity counts and verdict; fixed findings are left
            empty for the reconciler to fill in
        """
        items = per_file.items() if isinstance(per_file, dict) else per_file
        per_file_findings: dict[str, list[Finding]] = {}
        for path, findings in items:
            per_file_findings.setdefault(path, []).extend(findings)

        counts = count_by_severity(per_file_findings)
        verdict = derive_verdict(counts)

        result = ReviewRunResult(
            timestamp=datetime.now(timezone.utc),
            files_reviewed=len(per_file_findings) if files_reviewed is None else files_reviewed,
            per_file_findings=per_file_findings,
            severity_counts=counts,
            verdict=verdict,
            model=self.model,
        )
        logger.info(f"Aggregated {result.total_issues} finding(s): {verdict.value}")
        return result

    @staticmethod
    def summarize(result: ReviewRunResult) -> str:
        """Generate a one-line summary of the run."""
        if result.files_reviewed == 0:
            return "No files to review."
        if result.total_issues == 0:
            return f"✅ No issues found in {result.files_reviewed} file(s)."

        parts = []
        if result.critical_count:
            parts.append(f"🔴 {result.critical_count} critical")
        if result.error_count:
            parts.append(f"❌ {result.error_count} errors")
        if result.warning_count:
            parts.append(f"🟡 {result.warning_count} warnings")
        if result.info_count:
            parts.append(f"💡 {result.info_count} info")

        return (
            f"Found {', '.join(parts)} in {result.files_with_issues} of "
            f"{result.files_reviewed} file(s)."
        )
