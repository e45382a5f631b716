"""Review-depth selection from file size and change density."""

from dataclasses import dataclass
from enum import Enum


class StrategyName(Enum):
    QUICK_SCAN = "quick-scan"
    STANDARD = "standard"
    THOROUGH = "thorough"


@dataclass(frozen=True)
class ReviewStrategy:
    """Token budget, sampling temperature and focus for one file review."""

    name: StrategyName
    token_budget: int
    temperature: float
    focus: str
    directive: str


QUICK_SCAN = ReviewStrategy(
    name=StrategyName.QUICK_SCAN,
    token_budget=2048,
    temperature=0.1,
    focus="critical and security issues only",
    directive=(
        "Focus ONLY on critical bugs and security vulnerabilities. "
        "Skip style and minor issues."
    ),
)

STANDARD = ReviewStrategy(
    name=StrategyName.STANDARD,
    token_budget=3072,
    temperature=0.2,
    focus="errors and important warnings",
    directive="Review for errors, security issues, and important warnings. Be practical.",
)

THOROUGH = ReviewStrategy(
    name=StrategyName.THOROUGH,
    token_budget=4096,
    temperature=0.1,
    focus="detailed review with improvement suggestions",
    directive=(
        "Provide comprehensive review including best practices, "
        "optimization opportunities, and detailed suggestions."
    ),
)

LARGE_FILE_LINES = 500
MEDIUM_FILE_LINES = 200
SMALL_CHANGE_PERCENT = 20


def change_percent(line_count: int, changed_lines: list[int] | None) -> float:
    """Share of the file that changed; 100 when the whole file is in scope."""
    if not changed_lines or line_count <= 0:
        return 100.0
    return len(changed_lines) / line_count * 100


def select_strategy(line_count: int, change_pct: float) -> ReviewStrategy:
    """Pick the review depth. Pure: same inputs, same strategy."""
    if line_count > LARGE_FILE_LINES:
        return QUICK_SCAN
    if line_count > MEDIUM_FILE_LINES or change_pct < SMALL_CHANGE_PERCENT:
        return STANDARD
    return THOROUGH
