"""Configuration loading and validation for CI Code Reviewer."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = Path(".ai-review.yml")

DEFAULT_EXTENSIONS = [
    ".svelte",
    ".js",
    ".ts",
    ".jsx",
    ".tsx",
    ".vue",
    ".py",
]

DEFAULT_SKIP_DIRS = [
    "node_modules",
    ".svelte-kit",
    "build",
    "dist",
    "out",
    "coverage",
    ".next",
    ".git",
    "__pycache__",
    ".venv",
    "venv",
]


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""

    pass


@dataclass
class OracleApiConfig:
    """Review oracle (Anthropic Messages API) configuration."""

    api_key: str
    base_url: str = "https://api.anthropic.com"
    model: str = "claude-3-haiku-20240307"
    timeout_seconds: int = 120


@dataclass
class VcsSettings:
    """Change-set resolution settings."""

    pull_request: bool = False
    base_sha: str | None = None
    head_sha: str | None = None
    base_branch: str | None = None
    source_root: str = "src"
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    skip_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))


@dataclass
class CacheSettings:
    """Review cache settings."""

    enabled: bool = True
    directory: str = ".ai-review-cache"
    max_age_days: float = 7


@dataclass
class SchedulerSettings:
    """Batch dispatch settings."""

    batch_size: int = 3
    pause_seconds: float = 2.0
    call_timeout_seconds: float | None = None


@dataclass
class ReviewSettings:
    """Review prompt settings."""

    context_radius: int = 5
    framework: str = "Svelte 5"


@dataclass
class OutputSettings:
    """Persisted artifact locations."""

    results_path: str = "ai-review-results.json"
    previous_path: str = ".ai-review-previous.json"
    analytics_path: str = "ai-review-analytics.json"


@dataclass
class Config:
    """Complete application configuration."""

    oracle: OracleApiConfig
    vcs: VcsSettings = field(default_factory=VcsSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    scheduler: SchedulerSettings = field(default_factory=SchedulerSettings)
    review: ReviewSettings = field(default_factory=ReviewSettings)
    output: OutputSettings = field(default_factory=OutputSettings)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Path to config file (default: .ai-review.yml if present)

    Returns:
        Loaded configuration

    Raises:
        ConfigError: If the config file exists but cannot be parsed
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                raw_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        if not isinstance(raw_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

    raw_config = _expand_env_vars(raw_config)

    return _parse_config(raw_config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in config."""
    if isinstance(obj, str):
        if obj.startswith("${") and obj.endswith("}"):
            env_var = obj[2:-1]
            return os.environ.get(env_var, "")
        return obj
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _parse_config(raw: dict[str, Any]) -> Config:
    """Parse raw config dict into Config object, overlaying the environment."""
    # Oracle config
    oracle_raw = raw.get("oracle", {})
    oracle = OracleApiConfig(
        api_key=oracle_raw.get("api_key") or os.environ.get("ANTHROPIC_API_KEY", ""),
        base_url=oracle_raw.get("base_url", "https://api.anthropic.com"),
        model=oracle_raw.get("model", "claude-3-haiku-20240307"),
        timeout_seconds=oracle_raw.get("timeout_seconds", 120),
    )

    # Version control, with CI environment taking precedence
    vcs_raw = raw.get("vcs", {})
    pull_request = os.environ.get("GITHUB_EVENT_NAME") == "pull_request" or bool(
        vcs_raw.get("pull_request", False)
    )
    base_branch = os.environ.get("GITHUB_BASE_REF") or vcs_raw.get("base_branch")
    if pull_request and not base_branch:
        base_branch = "main"
    vcs = VcsSettings(
        pull_request=pull_request,
        base_sha=os.environ.get("BASE_SHA") or vcs_raw.get("base_sha"),
        head_sha=os.environ.get("HEAD_SHA") or vcs_raw.get("head_sha"),
        base_branch=base_branch,
        source_root=vcs_raw.get("source_root", "src"),
        extensions=vcs_raw.get("extensions", list(DEFAULT_EXTENSIONS)),
        skip_dirs=vcs_raw.get("skip_dirs", list(DEFAULT_SKIP_DIRS)),
    )

    cache_raw = raw.get("cache", {})
    cache = CacheSettings(
        enabled=cache_raw.get("enabled", True),
        directory=cache_raw.get("directory", ".ai-review-cache"),
        max_age_days=cache_raw.get("max_age_days", 7),
    )

    sched_raw = raw.get("scheduler", {})
    scheduler = SchedulerSettings(
        batch_size=sched_raw.get("batch_size", 3),
        pause_seconds=sched_raw.get("pause_seconds", 2.0),
        call_timeout_seconds=sched_raw.get("call_timeout_seconds"),
    )

    review_raw = raw.get("review", {})
    review = ReviewSettings(
        context_radius=review_raw.get("context_radius", 5),
        framework=review_raw.get("framework", "Svelte 5"),
    )

    out_raw = raw.get("output", {})
    output = OutputSettings(
        results_path=out_raw.get("results_path", "ai-review-results.json"),
        previous_path=out_raw.get("previous_path", ".ai-review-previous.json"),
        analytics_path=out_raw.get("analytics_path", "ai-review-analytics.json"),
    )

    return Config(
        oracle=oracle,
        vcs=vcs,
        cache=cache,
        scheduler=scheduler,
        review=review,
        output=output,
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of errors.

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not config.oracle.api_key:
        errors.append("Missing Anthropic API key (set ANTHROPIC_API_KEY or oracle.api_key)")

    if config.scheduler.batch_size < 1:
        errors.append(f"scheduler.batch_size must be >= 1, got {config.scheduler.batch_size}")

    if config.scheduler.pause_seconds < 0:
        errors.append(
            f"scheduler.pause_seconds must be >= 0, got {config.scheduler.pause_seconds}"
        )

    if config.review.context_radius < 0:
        errors.append(f"review.context_radius must be >= 0, got {config.review.context_radius}")

    if not config.vcs.extensions:
        errors.append("No source extensions configured (vcs.extensions)")

    return errors
