"""Review context models."""

from dataclasses import dataclass, field


@dataclass
class ReviewContext:
    """Condensed view of one file prepared for the review oracle.

    When ``is_full_file`` is set, ``payload`` is the raw file content and
    ``changed_lines`` is empty. Otherwise ``payload`` is a windowed rendering
    of the changed regions with numbered, marked lines.
    """

    payload: str
    total_lines: int
    is_full_file: bool
    changed_lines: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.is_full_file and self.changed_lines:
            raise ValueError("A full-file context cannot carry changed lines")

    def to_prompt_section(self) -> str:
        """Describe the payload shape for inclusion in the prompt."""
        if self.is_full_file:
            return f"Full file ({self.total_lines} lines)."
        return (
            f"Changed regions only ({len(self.changed_lines)} changed of "
            f"{self.total_lines} lines). Lines are numbered; '>' marks new or "
            "modified lines, '...' marks omitted code."
        )
