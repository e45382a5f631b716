"""Persistent state: review cache, analytics and run artifacts."""

from ci_reviewer.storage.analytics import AnalyticsState, AnalyticsTracker
from ci_reviewer.storage.cache import ReviewCache
from ci_reviewer.storage.fingerprint import fingerprint, normalize_path

__all__ = [
    "AnalyticsState",
    "AnalyticsTracker",
    "ReviewCache",
    "fingerprint",
    "normalize_path",
]
