"""Cumulative cross-run review analytics.

The state file is read at the start of ``track`` and written back at its end.
There is no locking: one run writes the file at a time.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ci_reviewer.models.findings import Category, Severity
from ci_reviewer.models.review import ReviewRunResult

logger = logging.getLogger(__name__)

RECOMMENDATIONS = {
    Category.FRAMEWORK_IDIOM.value: "Consider team training on current framework idioms",
    Category.ACCESSIBILITY.value: "Add accessibility linting to pre-commit hooks",
    Category.SECURITY.value: "Schedule security review session",
    Category.PERFORMANCE.value: "Profile the most-flagged components and budget render work",
    Category.CODE_QUALITY.value: "Agree on shared conventions and enforce them with a linter",
    Category.TYPE_SAFETY.value: "Enable stricter type checking in CI",
}


@dataclass
class FileStats:
    reviews: int = 0
    issues: int = 0

    @property
    def average(self) -> float:
        return self.issues / self.reviews if self.reviews else 0.0


@dataclass
class AnalyticsState:
    """Counters accumulated over every run."""

    total_reviews: int = 0
    total_issues: int = 0
    issues_by_category: dict[str, int] = field(default_factory=dict)
    issues_by_severity: dict[str, int] = field(default_factory=dict)
    file_stats: dict[str, FileStats] = field(default_factory=dict)
    last_updated: str | None = None

    @property
    def top_category(self) -> str | None:
        """Most frequent category, or None when nothing was recorded yet."""
        ranked = self.ranked_categories()
        return ranked[0][0] if ranked else None

    def ranked_categories(self) -> list[tuple[str, int]]:
        return sorted(self.issues_by_category.items(), key=lambda kv: kv[1], reverse=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalReviews": self.total_reviews,
            "totalIssues": self.total_issues,
            "issuesByCategory": dict(self.issues_by_category),
            "issuesBySeverity": dict(self.issues_by_severity),
            "fileStats": {
                path: {"reviews": s.reviews, "issues": s.issues}
                for path, s in self.file_stats.items()
            },
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AnalyticsState":
        return cls(
            total_reviews=int(raw.get("totalReviews", 0)),
            total_issues=int(raw.get("totalIssues", 0)),
            issues_by_category={k: int(v) for k, v in raw.get("issuesByCategory", {}).items()},
            issues_by_severity={k: int(v) for k, v in raw.get("issuesBySeverity", {}).items()},
            file_stats={
                path: FileStats(reviews=int(s.get("reviews", 0)), issues=int(s.get("issues", 0)))
                for path, s in raw.get("fileStats", {}).items()
            },
            last_updated=raw.get("lastUpdated"),
        )


class AnalyticsTracker:
    """Loads, updates and persists the analytics state file."""

    def __init__(self, path: str | Path = "ai-review-analytics.json") -> None:
        self.path = Path(path)

    def load(self) -> AnalyticsState:
        """Read the state file, falling back to a zero state."""
        try:
            with open(self.path, encoding="utf-8") as f:
                return AnalyticsState.from_dict(json.load(f))
        except FileNotFoundError:
            return AnalyticsState()
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Analytics file {self.path} unreadable, starting fresh: {e}")
            return AnalyticsState()

    def save(self, state: AnalyticsState) -> None:
        state.last_updated = datetime.now(timezone.utc).isoformat()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2)

    def track(self, result: ReviewRunResult) -> AnalyticsState:
        """Fold one run into the cumulative state and persist it."""
        state = self.load()

        state.total_reviews += 1
        state.total_issues += result.total_issues

        for severity in Severity:
            count = result.severity_counts.get(severity, 0)
            state.issues_by_severity[severity.value] = (
                state.issues_by_severity.get(severity.value, 0) + count
            )

        for file_path, findings in result.per_file_findings.items():
            stats = state.file_stats.setdefault(file_path, FileStats())
            stats.reviews += 1
            stats.issues += len(findings)

        for category, count in result.findings_by_category.items():
            if count:
                state.issues_by_category[category.value] = (
                    state.issues_by_category.get(category.value, 0) + count
                )

        self.save(state)
        logger.debug(
            f"Analytics updated: {state.total_reviews} reviews, {state.total_issues} issues"
        )
        return state

    def summarize(self, state: AnalyticsState | None = None) -> str:
        """Render human-readable insights from the cumulative state."""
        if state is None:
            state = self.load()

        lines = [
            "## Code Quality Insights",
            "",
            f"**Total Reviews:** {state.total_reviews}",
            f"**Total Issues Found:** {state.total_issues}",
            "",
        ]

        top_categories = state.ranked_categories()[:5]
        if top_categories:
            lines.append("### Most Common Issue Types:")
            for i, (category, count) in enumerate(top_categories, start=1):
                lines.append(f"{i}. **{category}**: {count} issues")
            lines.append("")

        problem_files = sorted(
            ((path, s) for path, s in state.file_stats.items() if s.issues > 0),
            key=lambda item: item[1].issues,
            reverse=True,
        )[:3]
        if problem_files:
            lines.append("### Files Needing Attention:")
            for path, stats in problem_files:
                lines.append(
                    f"- `{path}`: {stats.issues} issues (avg {stats.average:.1f} per review)"
                )
            lines.append("")

        lines.append("### Recommendations:")
        recommendation = RECOMMENDATIONS.get(state.top_category or "")
        if recommendation:
            lines.append(f"- {recommendation}")
        else:
            lines.append("- No recurring issue pattern yet")

        return "\n".join(lines) + "\n"
