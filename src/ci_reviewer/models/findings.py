"""Finding models for code review results."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Severity(Enum):
    """Severity levels for findings, most severe first.

    - CRITICAL: Blocks the pipeline (security holes, crashes, data loss).
    - ERROR: Real defect that should be fixed; reported but not blocking.
    - WARNING: Likely problem or risky pattern.
    - INFO: Improvement suggestion.
    """

    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Category(Enum):
    """Categories for review findings."""

    FRAMEWORK_IDIOM = "framework-idiom"
    ACCESSIBILITY = "accessibility"
    PERFORMANCE = "performance"
    SECURITY = "security"
    CODE_QUALITY = "code-quality"
    TYPE_SAFETY = "type-safety"


@dataclass
class Finding:
    """A single issue reported by the review oracle for one file."""

    line: int
    severity: Severity
    category: Category
    issue: str
    suggestion: str = ""
    impact: str = ""
    code: str = ""

    def __post_init__(self) -> None:
        """Validate finding data."""
        if isinstance(self.line, bool) or not isinstance(self.line, int):
            raise ValueError(f"line must be an integer, got {self.line!r}")
        if not isinstance(self.severity, Severity):
            raise ValueError(f"severity must be a Severity, got {self.severity!r}")
        if not isinstance(self.category, Category):
            raise ValueError(f"category must be a Category, got {self.category!r}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the cache and the run artifacts."""
        return {
            "line": self.line,
            "code": self.code,
            "severity": self.severity.value,
            "category": self.category.value,
            "issue": self.issue,
            "suggestion": self.suggestion,
            "impact": self.impact,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Finding":
        """Rebuild a finding written by ``to_dict``.

        Raises:
            KeyError, ValueError, TypeError: If the record is malformed
        """
        return cls(
            line=int(raw["line"]),
            severity=Severity(raw["severity"]),
            category=Category(raw["category"]),
            issue=str(raw["issue"]),
            suggestion=str(raw.get("suggestion") or ""),
            impact=str(raw.get("impact") or ""),
            code=str(raw.get("code") or ""),
        )


@dataclass(frozen=True)
class FixedFinding:
    """A finding from the previous run that no longer appears."""

    file_path: str
    line: int
    category: Category
    severity: Severity
    issue: str

    @property
    def key(self) -> tuple[str, int, Category]:
        return (self.file_path, self.line, self.category)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file_path,
            "line": self.line,
            "category": self.category.value,
            "severity": self.severity.value,
            "issue": self.issue,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FixedFinding":
        return cls(
            file_path=str(raw["file"]),
            line=int(raw["line"]),
            category=Category(raw["category"]),
            severity=Severity(raw["severity"]),
            issue=str(raw.get("issue") or ""),
        )
