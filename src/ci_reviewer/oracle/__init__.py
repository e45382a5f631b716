"""Review oracle access: HTTP client and per-file reviewer."""

from ci_reviewer.oracle.client import OracleClient, OracleConfig, OracleError
from ci_reviewer.oracle.reviewer import FileReviewer, build_prompt, extract_findings

__all__ = [
    "FileReviewer",
    "OracleClient",
    "OracleConfig",
    "OracleError",
    "build_prompt",
    "extract_findings",
]
