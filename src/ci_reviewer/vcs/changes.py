"""Change-set resolution from git with an ordered fallback chain.

The resolver tries several diff strategies in priority order and takes the
first one that yields reviewable files. When none does (shallow clone, no
remote, no history), it scans the whole source tree instead.
"""

import logging
import os
import re
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ci_reviewer.config import VcsSettings
from ci_reviewer.storage.fingerprint import normalize_path

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 30
_HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,(\d+))? @@")


class GitError(Exception):
    """Raised when a git invocation fails or is unavailable."""

    pass


GitRunner = Callable[[list[str], Path], str]


def run_git(args: list[str], cwd: Path) -> str:
    """Run a git command and return its stdout.

    Raises:
        GitError: If git is missing, times out or exits non-zero
    """
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {' '.join(args)} timed out") from e
    except subprocess.CalledProcessError as e:
        raise GitError(f"git {' '.join(args)} failed: {(e.stderr or '').strip()}") from e
    return completed.stdout


@dataclass(frozen=True)
class DiffStrategy:
    """One way of naming the revision range to diff."""

    name: str
    revisions: tuple[str, ...]

    def name_only_args(self) -> list[str]:
        # Unquoted output, so non-ASCII paths match the filesystem.
        return ["-c", "core.quotePath=off", "diff", "--name-only", *self.revisions]

    def file_diff_args(self, path: str) -> list[str]:
        return ["diff", "--unified=0", "--no-color", *self.revisions, "--", path]


def build_strategies(settings: VcsSettings) -> list[DiffStrategy]:
    """Return the applicable strategies in priority order."""
    strategies = []
    if settings.base_sha and settings.head_sha:
        strategies.append(
            DiffStrategy("explicit-revisions", (settings.base_sha, settings.head_sha))
        )
    if settings.base_branch:
        strategies.append(
            DiffStrategy("base-branch", (f"origin/{settings.base_branch}...HEAD",))
        )
    strategies.append(DiffStrategy("previous-commit", ("HEAD~1", "HEAD")))
    strategies.append(DiffStrategy("working-tree", ("HEAD",)))
    return strategies


def parse_changed_lines(diff_text: str) -> list[int]:
    """Extract 1-indexed new-file line numbers added or modified by a diff."""
    changed: set[int] = set()
    current = 0
    in_hunk = False

    for line in diff_text.splitlines():
        match = _HUNK_HEADER.match(line)
        if match:
            current = int(match.group(1))
            in_hunk = True
            continue
        if not in_hunk or line.startswith("\\"):
            continue
        if line.startswith("diff --git"):
            in_hunk = False
        elif line.startswith("+"):
            changed.add(current)
            current += 1
        elif line.startswith("-"):
            continue
        else:
            current += 1

    return sorted(changed)


class ChangeSetResolver:
    """Produces the ordered list of files that need review."""

    def __init__(
        self,
        settings: VcsSettings,
        root: str | Path = ".",
        git: GitRunner = run_git,
    ) -> None:
        """Initialize the resolver.

        Args:
            settings: Run mode, revisions and file filters
            root: Repository root; returned paths are relative to it
            git: Callable running ``git`` with the given arguments
        """
        self.settings = settings
        self.root = Path(root)
        self._git = git
        self.strategies = build_strategies(settings)
        self.active_strategy: DiffStrategy | None = None
        self._extensions = tuple(ext.lower() for ext in settings.extensions)
        self._skip_dirs = set(settings.skip_dirs)

    def resolve(self) -> list[str]:
        """Try each diff strategy in order, falling back to a full scan."""
        mode = "pull-request" if self.settings.pull_request else "local"
        logger.info(f"Resolving changed files ({mode} mode)")

        for strategy in self.strategies:
            try:
                output = self._git(strategy.name_only_args(), self.root)
            except GitError as e:
                logger.info(f"Diff strategy '{strategy.name}' failed: {e}")
                continue

            files = self._filter(output.splitlines())
            if files:
                logger.info(f"Diff strategy '{strategy.name}' found {len(files)} file(s)")
                self.active_strategy = strategy
                return files
            logger.debug(f"Diff strategy '{strategy.name}' yielded no reviewable files")

        self.active_strategy = None
        files = self.scan()
        logger.info(f"Falling back to full scan: {len(files)} file(s)")
        return files

    def changed_lines(self, path: str) -> list[int] | None:
        """Changed line numbers of one file, or None when no diff is available."""
        if self.active_strategy is None:
            return None
        try:
            diff = self._git(self.active_strategy.file_diff_args(path), self.root)
        except GitError as e:
            logger.debug(f"No diff for {path}: {e}")
            return None
        return parse_changed_lines(diff)

    def scan(self) -> list[str]:
        """Recursively list reviewable files under the source root."""
        source_root = self.root / self.settings.source_root
        if not source_root.is_dir():
            logger.warning(f"Directory {source_root} does not exist")
            return []

        def _raise(error: OSError) -> None:
            raise error

        files = []
        for dirpath, dirnames, filenames in os.walk(source_root, onerror=_raise):
            dirnames[:] = sorted(d for d in dirnames if d not in self._skip_dirs)
            for filename in sorted(filenames):
                if filename.lower().endswith(self._extensions):
                    full = Path(dirpath) / filename
                    files.append(full.relative_to(self.root).as_posix())
        return files

    def _filter(self, paths: list[str]) -> list[str]:
        seen: set[str] = set()
        files = []
        for raw in paths:
            path = normalize_path(raw.strip())
            if not path or path in seen:
                continue
            seen.add(path)
            if not path.lower().endswith(self._extensions):
                continue
            if any(part in self._skip_dirs for part in Path(path).parts[:-1]):
                continue
            if not (self.root / path).is_file():
                continue
            files.append(path)
        return files
