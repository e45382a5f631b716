"""CI Code Reviewer - incremental, cache-aware AI code review."""

__version__ = "0.1.0"
