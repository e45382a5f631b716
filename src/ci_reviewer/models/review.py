"""Review result models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ci_reviewer.models.findings import Category, Finding, FixedFinding, Severity


class Verdict(Enum):
    """Run-level outcome derived from the aggregated severities."""

    APPROVED = "approved"
    COMMENT = "comment"
    CHANGES_REQUESTED = "changes-requested"


@dataclass
class ReviewRunResult:
    """Final aggregated output of one pipeline run."""

    timestamp: datetime
    files_reviewed: int
    per_file_findings: dict[str, list[Finding]]
    severity_counts: dict[Severity, int]
    verdict: Verdict
    fixed_findings: list[FixedFinding] = field(default_factory=list)
    model: str = ""
    # None on a first run, when there is nothing to compare against.
    new_issue_count: int | None = None
    open_issue_count: int | None = None

    @classmethod
    def empty(cls, model: str = "") -> "ReviewRunResult":
        """Result for a run with nothing to review."""
        return cls(
            timestamp=datetime.now(timezone.utc),
            files_reviewed=0,
            per_file_findings={},
            severity_counts=dict.fromkeys(Severity, 0),
            verdict=Verdict.APPROVED,
            model=model,
        )

    @property
    def total_issues(self) -> int:
        return sum(len(findings) for findings in self.per_file_findings.values())

    @property
    def files_with_issues(self) -> int:
        return sum(1 for findings in self.per_file_findings.values() if findings)

    @property
    def critical_count(self) -> int:
        return self.severity_counts.get(Severity.CRITICAL, 0)

    @property
    def error_count(self) -> int:
        return self.severity_counts.get(Severity.ERROR, 0)

    @property
    def warning_count(self) -> int:
        return self.severity_counts.get(Severity.WARNING, 0)

    @property
    def info_count(self) -> int:
        return self.severity_counts.get(Severity.INFO, 0)

    @property
    def has_critical_issues(self) -> bool:
        """Check if the run should fail the pipeline."""
        return self.critical_count > 0

    @property
    def findings_by_category(self) -> dict[Category, int]:
        """Count findings by category."""
        counts: dict[Category, int] = dict.fromkeys(Category, 0)
        for findings in self.per_file_findings.values():
            for finding in findings:
                counts[finding.category] += 1
        return counts

    def iter_findings(self):
        """Yield ``(file_path, finding)`` pairs in file order."""
        for file_path, findings in self.per_file_findings.items():
            for finding in findings:
                yield file_path, finding

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the artifact shape consumed by reporting steps."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "model": self.model,
            "filesReviewed": self.files_reviewed,
            "filesWithIssues": self.files_with_issues,
            "totalIssues": self.total_issues,
            "criticalCount": self.critical_count,
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
            "infoCount": self.info_count,
            "severityCounts": {s.value: self.severity_counts.get(s, 0) for s in Severity},
            "verdict": self.verdict.value,
            "perFileFindings": {
                path: [f.to_dict() for f in findings]
                for path, findings in self.per_file_findings.items()
            },
            "fixedFindings": [f.to_dict() for f in self.fixed_findings],
            "newIssueCount": self.new_issue_count,
            "openIssueCount": self.open_issue_count,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ReviewRunResult":
        """Rebuild a result written by ``to_dict``.

        Raises:
            KeyError, ValueError, TypeError: If the record is malformed
        """
        per_file = {
            str(path): [Finding.from_dict(f) for f in findings]
            for path, findings in raw.get("perFileFindings", {}).items()
        }
        raw_counts = raw.get("severityCounts", {})
        return cls(
            timestamp=datetime.fromisoformat(raw["timestamp"]),
            files_reviewed=int(raw.get("filesReviewed", len(per_file))),
            per_file_findings=per_file,
            severity_counts={s: int(raw_counts.get(s.value, 0)) for s in Severity},
            verdict=Verdict(raw.get("verdict", Verdict.APPROVED.value)),
            fixed_findings=[FixedFinding.from_dict(f) for f in raw.get("fixedFindings", [])],
            model=str(raw.get("model") or ""),
            new_issue_count=raw.get("newIssueCount"),
            open_issue_count=raw.get("openIssueCount"),
        )
