"""Content-addressed cache of per-file review findings.

Each record lives in its own JSON file named after the cache version, the
sanitized file path and the SHA-256 of the file content, so any byte-level
change to a file produces a different key. Records also carry their path and
fingerprint, which are checked again on lookup.

A missing, unreadable or corrupt record is always a cache miss, never an
error: the cache is an optimization and must not be able to fail a run.
"""

import json
import logging
import shutil
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ci_reviewer.models.findings import Finding
from ci_reviewer.storage.fingerprint import fingerprint, normalize_path, sanitize_path

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0"
DEFAULT_MAX_AGE_DAYS = 7
_MAX_PATH_TOKEN = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewCache:
    """Stores and retrieves findings keyed by (path, content fingerprint)."""

    def __init__(
        self,
        directory: str | Path = ".ai-review-cache",
        max_age_days: float = DEFAULT_MAX_AGE_DAYS,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the cache.

        Args:
            directory: Directory holding one JSON record per entry
            max_age_days: Entries older than this are ignored on lookup
            now: Clock returning an aware datetime (injectable for tests)
        """
        self.directory = Path(directory)
        self.max_age = timedelta(days=max_age_days)
        self._now = now

    def cache_key(self, path: str, content: str | bytes) -> str:
        """Build the record name for a file path and its content."""
        token = sanitize_path(path)[-_MAX_PATH_TOKEN:]
        return f"{CACHE_VERSION}_{token}_{fingerprint(content)}"

    def _record_path(self, path: str, content: str | bytes) -> Path:
        return self.directory / f"{self.cache_key(path, content)}.json"

    def lookup(self, path: str, content: str | bytes) -> list[Finding] | None:
        """Return cached findings for this exact content, or None on a miss."""
        record_path = self._record_path(path, content)
        if not record_path.exists():
            return None

        try:
            with open(record_path, encoding="utf-8") as f:
                record = json.load(f)
            if record.get("version") != CACHE_VERSION:
                return None
            if record.get("filePath") != normalize_path(path):
                return None
            if record.get("fingerprint", fingerprint(content)) != fingerprint(content):
                return None

            age = self._now() - datetime.fromisoformat(record["timestamp"])
            if age >= self.max_age:
                logger.debug(f"Cache entry for {path} expired ({age})")
                return None

            findings = [Finding.from_dict(raw) for raw in record.get("findings", [])]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Cache read error for {path}: {e}")
            return None

        logger.info(
            f"Using cached review for {path} (saved {int(age.total_seconds() // 60)} min ago)"
        )
        return findings

    def store(self, path: str, content: str | bytes, findings: list[Finding]) -> None:
        """Persist findings for this exact content. Write errors are logged only."""
        record = {
            "filePath": normalize_path(path),
            "fingerprint": fingerprint(content),
            "timestamp": self._now().isoformat(),
            "version": CACHE_VERSION,
            "findings": [f.to_dict() for f in findings],
        }
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(self._record_path(path, content), "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
        except OSError as e:
            logger.warning(f"Cache write error for {path}: {e}")

    def evict_older_than(self, max_age_days: float = DEFAULT_MAX_AGE_DAYS) -> int:
        """Delete records older than the threshold and return how many went."""
        if not self.directory.is_dir():
            return 0

        threshold = timedelta(days=max_age_days)
        now = self._now()
        cleared = 0
        for record_path in self.directory.glob("*.json"):
            written = self._record_time(record_path)
            if written is None or now - written <= threshold:
                continue
            try:
                record_path.unlink()
                cleared += 1
            except OSError as e:
                logger.warning(f"Could not remove cache file {record_path}: {e}")

        if cleared:
            logger.info(f"Cleared {cleared} old cache file(s)")
        return cleared

    def clear(self) -> int:
        """Remove every record and the cache directory itself."""
        if not self.directory.is_dir():
            return 0
        cleared = sum(1 for p in self.directory.iterdir() if p.is_file())
        shutil.rmtree(self.directory)
        logger.info(f"Cleared {cleared} cache file(s)")
        return cleared

    def _record_time(self, record_path: Path) -> datetime | None:
        """When a record was written: its timestamp, else the file mtime."""
        try:
            with open(record_path, encoding="utf-8") as f:
                written = datetime.fromisoformat(json.load(f)["timestamp"])
            if written.tzinfo is None:
                written = written.replace(tzinfo=timezone.utc)
            return written
        except (OSError, ValueError, KeyError, TypeError):
            pass
        try:
            return datetime.fromtimestamp(record_path.stat().st_mtime, tz=timezone.utc)
        except OSError:
            return None
