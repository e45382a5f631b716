"""Content fingerprints used for cache keys and change detection."""

import hashlib
import re

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def fingerprint(content: str | bytes) -> str:
    """Return the SHA-256 hex digest of the content (UTF-8 for text)."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def normalize_path(path: str) -> str:
    """Normalize a file path so the same file always yields the same key."""
    normalized = str(path).replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def sanitize_path(path: str) -> str:
    """Flatten a path into a filename-safe token."""
    return _UNSAFE_CHARS.sub("_", normalize_path(path))
