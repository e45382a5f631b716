"""Anthropic Messages API client used as the review oracle."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

ANTHROPIC_API_BASE = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"


class OracleError(Exception):
    """Raised when the oracle cannot produce a response."""

    pass


@dataclass
class OracleConfig:
    """Configuration for the oracle client."""

    api_key: str
    model: str = "claude-3-haiku-20240307"
    base_url: str = ANTHROPIC_API_BASE
    timeout: int = 120


class OracleClient:
    """Sends review prompts and returns the raw completion text."""

    def __init__(self, config: OracleConfig) -> None:
        """Initialize the oracle client.

        Args:
            config: Configuration for the client
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={
                "x-api-key": config.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
            timeout=config.timeout,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "OracleClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def submit(self, prompt: str, max_tokens: int = 4096, temperature: float = 0.3) -> str:
        """Send one prompt and return the concatenated text of the reply.

        Args:
            prompt: User prompt
            max_tokens: Token budget for the reply
            temperature: Sampling temperature

        Returns:
            Raw completion text

        Raises:
            OracleError: On transport, HTTP or response-shape errors
        """
        body = {
            "model": self.config.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            response = await self._client.post("/v1/messages", json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise OracleError(
                f"Oracle returned HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise OracleError(f"Oracle request failed: {e}") from e
        except ValueError as e:
            raise OracleError(f"Oracle returned invalid JSON: {e}") from e

        return self._extract_text(data)

    def _extract_text(self, data: Any) -> str:
        """Join the text blocks of a Messages API response."""
        if not isinstance(data, dict) or not isinstance(data.get("content"), list):
            raise OracleError("Oracle response has no content blocks")

        texts = [
            block.get("text", "")
            for block in data["content"]
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        usage = data.get("usage") or {}
        logger.debug(
            f"Oracle reply: {usage.get('input_tokens', '?')} in / "
            f"{usage.get('output_tokens', '?')} out tokens"
        )
        return "".join(texts).strip()
