"""Per-file review: prompt construction, oracle call and findings extraction."""

import asyncio
import json
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ci_reviewer.models.context import ReviewContext
from ci_reviewer.models.findings import Category, Finding, Severity
from ci_reviewer.oracle.client import OracleClient, OracleError
from ci_reviewer.orchestrator.context import DEFAULT_CONTEXT_RADIUS, extract_context
from ci_reviewer.orchestrator.strategy import ReviewStrategy, change_percent, select_strategy
from ci_reviewer.storage.cache import ReviewCache

logger = logging.getLogger(__name__)

_SEVERITIES = {s.value: s for s in Severity}
_CATEGORIES = {c.value: c for c in Category}


def build_prompt(
    file_path: str,
    context: ReviewContext,
    strategy: ReviewStrategy,
    framework: str = "Svelte 5",
) -> str:
    """Build the review prompt for one file."""
    severities = "|".join(s.value for s in Severity)
    categories = "|".join(c.value for c in Category)
    suffix = Path(file_path).suffix.lstrip(".")

    return f"""You are an expert {framework} code reviewer. Analyze this code and find issues.

**Review depth: {strategy.name.value}** ({strategy.focus})
{strategy.directive}

Review for:
1. Idiomatic use of {framework}
2. Accessibility (WCAG 2.1 AA compliance)
3. Performance problems
4. Security vulnerabilities
5. Code quality and error handling
6. Type safety

Return ONLY a valid JSON array with this exact format:
[
  {{
    "line": 10,
    "severity": "{severities}",
    "category": "{categories}",
    "issue": "What is wrong",
    "suggestion": "How to fix it",
    "impact": "Why it matters"
  }}
]

Severity semantics: critical = must fix before merge (security holes, crashes,
data loss); error = real defect; warning = likely problem; info = improvement.
Use line numbers of the file as shown. If no issues found, return: []

File: {file_path}
{context.to_prompt_section()}

Code:
```{suffix}
{context.payload}
```

Remember: Return ONLY the JSON array, no explanations."""


def find_json_array(text: str) -> list[Any] | None:
    """Return the first well-formed JSON array embedded in free text."""
    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except ValueError:
            pass
        else:
            if isinstance(value, list):
                return value
        start = text.find("[", start + 1)
    return None


def _parse_line(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid line {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (int, str)):
        return int(value)
    raise ValueError(f"invalid line {value!r}")


def _parse_finding(raw: Any, lines: list[str]) -> Finding:
    """Validate one raw finding and look up the code on its line."""
    if not isinstance(raw, dict):
        raise ValueError(f"finding is not an object: {raw!r}")

    line = _parse_line(raw.get("line"))
    severity = _SEVERITIES.get(str(raw.get("severity", "")).lower())
    if severity is None:
        raise ValueError(f"unknown severity {raw.get('severity')!r}")
    category = _CATEGORIES.get(str(raw.get("category", "")).lower(), Category.CODE_QUALITY)

    issue = raw.get("issue") or raw.get("message")
    if not isinstance(issue, str) or not issue.strip():
        raise ValueError("finding has no issue text")

    code = lines[line - 1].strip() if 1 <= line <= len(lines) else ""

    return Finding(
        line=line,
        severity=severity,
        category=category,
        issue=issue.strip(),
        suggestion=str(raw.get("suggestion") or ""),
        impact=str(raw.get("impact") or ""),
        code=code,
    )


def extract_findings(text: str, lines: list[str]) -> list[Finding] | None:
    """Extract and validate findings from an oracle reply.

    Args:
        text: Raw oracle output
        lines: Lines of the reviewed file, for code lookup

    Returns:
        Validated findings, or None if no array was found or it failed
        validation
    """
    raw_findings = find_json_array(text)
    if raw_findings is None:
        logger.warning(f"No JSON array found in oracle response: {text[:200]!r}")
        return None

    try:
        return [_parse_finding(raw, lines) for raw in raw_findings]
    except (ValueError, TypeError) as e:
        logger.warning(f"Rejected malformed findings array: {e}")
        return None


class FileReviewer:
    """Reviews one file at a time against the oracle, using the cache first."""

    def __init__(
        self,
        client: OracleClient,
        cache: ReviewCache | None = None,
        changed_lines: Callable[[str], list[int] | None] | None = None,
        root: str | Path = ".",
        context_radius: int = DEFAULT_CONTEXT_RADIUS,
        framework: str = "Svelte 5",
    ) -> None:
        """Initialize the reviewer.

        Args:
            client: Oracle client
            cache: Review cache; None disables caching
            changed_lines: Returns changed line numbers for a path, or None
            root: Directory that file paths are relative to
            context_radius: Context lines kept around each change
            framework: Framework named in the prompt
        """
        self.client = client
        self.cache = cache
        self._changed_lines = changed_lines or (lambda _path: None)
        self.root = Path(root)
        self.context_radius = context_radius
        self.framework = framework

    async def review(self, file_path: str) -> list[Finding]:
        """Review one file. Oracle failures yield no findings."""
        try:
            data = (self.root / file_path).read_bytes()
            content = data.decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {file_path}: {e}")
            return []

        # Keyed on raw bytes; a line-ending-only change must miss.
        if self.cache is not None:
            cached = self.cache.lookup(file_path, data)
            if cached is not None:
                return cached

        start_time = time.monotonic()

        changed = await asyncio.to_thread(self._changed_lines, file_path)
        context = extract_context(content, changed, self.context_radius)
        strategy = select_strategy(
            context.total_lines,
            change_percent(context.total_lines, context.changed_lines),
        )
        scope = "full file" if context.is_full_file else f"{len(context.changed_lines)} changed"
        logger.info(
            f"Reviewing {file_path} ({context.total_lines} lines, {scope}, "
            f"{strategy.name.value})"
        )

        prompt = build_prompt(file_path, context, strategy, self.framework)
        try:
            text = await self.client.submit(
                prompt,
                max_tokens=strategy.token_budget,
                temperature=strategy.temperature,
            )
        except OracleError as e:
            logger.error(f"Oracle failed for {file_path}: {e}")
            return []

        findings = extract_findings(text, content.split("\n"))
        if findings is None:
            return []

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(f"Found {len(findings)} issue(s) in {file_path} ({elapsed_ms} ms)")

        if self.cache is not None:
            self.cache.store(file_path, data, findings)
        return findings
