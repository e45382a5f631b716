"""Pytest configuration and shared fixtures."""

import pytest

SAMPLE_COMPONENT = """\
<script>
  let count = $state(0);
  let doubled = $derived(count * 2);

  function increment() {
    count += 1;
  }
</script>

<div onclick={increment}>
  <img src="/logo.png">
  {count} doubled is {doubled}
</div>
"""

CRITICAL_AND_INFO_RESPONSE = """\
Here is my review:
[
  {
    "line": 10,
    "severity": "critical",
    "category": "accessibility",
    "issue": "Clickable div is not keyboard accessible",
    "suggestion": "Use a <button> element",
    "impact": "Keyboard users cannot increment the counter"
  },
  {
    "line": 2,
    "severity": "info",
    "category": "framework-idiom",
    "issue": "Consider a more descriptive state name",
    "suggestion": "Rename count to clickCount",
    "impact": "Readability"
  }
]
"""

ENV_VARS = ("ANTHROPIC_API_KEY", "GITHUB_EVENT_NAME", "GITHUB_BASE_REF", "BASE_SHA", "HEAD_SHA")


class FakeOracle:
    """Stands in for OracleClient, answering per file path found in the prompt."""

    def __init__(self, responses=None, default="[]"):
        self.responses = dict(responses or {})
        self.default = default
        self.calls = []

    async def submit(self, prompt, max_tokens=4096, temperature=0.3):
        self.calls.append({"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature})
        for path, response in self.responses.items():
            if f"File: {path}\n" in prompt:
                if isinstance(response, Exception):
                    raise response
                return response
        return self.default

    async def close(self):
        pass


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CI environment variables from leaking into configuration."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_component() -> str:
    """A small Svelte component."""
    return SAMPLE_COMPONENT


@pytest.fixture
def critical_and_info_response() -> str:
    """Oracle reply with one critical and one info finding."""
    return CRITICAL_AND_INFO_RESPONSE


@pytest.fixture
def fake_oracle_factory():
    """Build FakeOracle instances."""
    return FakeOracle


@pytest.fixture
def make_finding():
    """Build a Finding with sensible defaults."""
    from ci_reviewer.models.findings import Category, Finding, Severity

    def _make(line=1, severity=Severity.WARNING, category=Category.CODE_QUALITY, issue="Issue"):
        return Finding(line=line, severity=severity, category=category, issue=issue)

    return _make


@pytest.fixture
def review_config(tmp_path):
    """Configuration with every persisted path under tmp_path."""
    from ci_reviewer.config import (
        CacheSettings,
        Config,
        OracleApiConfig,
        OutputSettings,
        SchedulerSettings,
    )

    return Config(
        oracle=OracleApiConfig(api_key="test-key"),
        cache=CacheSettings(directory=".ai-review-cache"),
        scheduler=SchedulerSettings(batch_size=3, pause_seconds=0),
        output=OutputSettings(
            results_path="ai-review-results.json",
            previous_path=".ai-review-previous.json",
            analytics_path="ai-review-analytics.json",
        ),
    )
