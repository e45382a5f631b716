"""Condensing a file into a review payload around its changed lines."""

from pathlib import Path

from ci_reviewer.models.context import ReviewContext

DEFAULT_CONTEXT_RADIUS = 5
GAP_MARKER = "..."


def extract_context(
    content: str,
    changed_lines: list[int] | None,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
) -> ReviewContext:
    """Build the review payload for one file.

    Args:
        content: Raw file content
        changed_lines: 1-indexed new or modified lines; None or empty means
            the whole file is reviewed
        context_radius: Lines of context kept before and after each change

    Returns:
        A full-file context, or a windowed rendering of the changed regions
    """
    all_lines = content.split("\n")
    total = len(all_lines)

    if not changed_lines:
        return ReviewContext(payload=content, total_lines=total, is_full_file=True)

    changed = sorted(set(changed_lines))
    changed_set = set(changed)

    included: set[int] = set()
    for line_no in changed:
        start = max(1, line_no - context_radius)
        end = min(total, line_no + context_radius)
        included.update(range(start, end + 1))

    rendered = []
    last = 0
    for line_no in sorted(included):
        if line_no > last + 1:
            rendered.append(GAP_MARKER)
        marker = "> " if line_no in changed_set else "  "
        rendered.append(f"{line_no}: {marker}{all_lines[line_no - 1]}")
        last = line_no

    return ReviewContext(
        payload="\n".join(rendered) + "\n",
        total_lines=total,
        is_full_file=False,
        changed_lines=changed,
    )


def extract_file_context(
    path: str | Path,
    changed_lines: list[int] | None,
    context_radius: int = DEFAULT_CONTEXT_RADIUS,
) -> ReviewContext:
    """Read a file and build its review payload."""
    content = Path(path).read_text(encoding="utf-8")
    return extract_context(content, changed_lines, context_radius)
