"""Reading and writing the per-run result artifact and previous-run snapshot."""

import json
import logging
from pathlib import Path

from ci_reviewer.models.review import ReviewRunResult

logger = logging.getLogger(__name__)


def write_result(path: str | Path, result: ReviewRunResult) -> None:
    """Write a run result as pretty-printed JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2)
    logger.debug(f"Wrote review result to {path}")


def write_previous(path: str | Path, result: ReviewRunResult) -> None:
    """Overwrite the snapshot the next run reconciles against."""
    write_result(path, result)


def load_previous(path: str | Path) -> ReviewRunResult | None:
    """Load the previous run's snapshot.

    Returns:
        The snapshot, or None on a first run or when it cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        logger.info("No previous review snapshot found (first run)")
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return ReviewRunResult.from_dict(json.load(f))
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Ignoring unreadable previous snapshot {path}: {e}")
        return None
