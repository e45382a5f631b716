"""Version-control integration: change sets and changed lines."""

from ci_reviewer.vcs.changes import (
    ChangeSetResolver,
    DiffStrategy,
    GitError,
    build_strategies,
    parse_changed_lines,
)

__all__ = [
    "ChangeSetResolver",
    "DiffStrategy",
    "GitError",
    "build_strategies",
    "parse_changed_lines",
]
