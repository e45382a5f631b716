"""Batched concurrent dispatch of file reviews."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ci_reviewer.models.findings import Finding

logger = logging.getLogger(__name__)

ReviewFn = Callable[[str], Awaitable[list[Finding]]]


@dataclass
class SchedulerConfig:
    """Configuration for the batch scheduler."""

    batch_size: int = 3
    pause_seconds: float = 2.0
    call_timeout_seconds: float | None = None


class BatchScheduler:
    """Reviews files in fixed-size concurrent batches with a pause between them."""

    def __init__(
        self,
        batch_size: int = 3,
        pause_seconds: float = 2.0,
        config: SchedulerConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the scheduler.

        Args:
            batch_size: Files reviewed concurrently per batch
            pause_seconds: Pause between consecutive batches
            config: Optional full configuration (overrides other params)
            sleep: Coroutine used for the inter-batch pause
        """
        self.config = config or SchedulerConfig(
            batch_size=batch_size,
            pause_seconds=pause_seconds,
        )
        if self.config.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.config.batch_size}")
        self._sleep = sleep

    async def run(
        self,
        files: list[str],
        review_fn: ReviewFn,
    ) -> list[tuple[str, list[Finding]]]:
        """Review every file and return results in input order.

        A failing review yields an empty findings list for that file only;
        the rest of its batch and later batches still run.
        """
        size = self.config.batch_size
        batches = [files[i : i + size] for i in range(0, len(files), size)]
        results: list[tuple[str, list[Finding]]] = []

        for index, batch in enumerate(batches, start=1):
            logger.info(f"Reviewing batch {index}/{len(batches)} ({len(batch)} file(s))")

            tasks = [
                asyncio.create_task(
                    self._review_with_timeout(review_fn, path),
                    name=f"review-{path}",
                )
                for path in batch
            ]
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

            for path, outcome in zip(batch, outcomes):
                if isinstance(outcome, asyncio.TimeoutError):
                    logger.warning(f"Review of {path} timed out")
                    results.append((path, []))
                elif isinstance(outcome, Exception):
                    logger.error(f"Review of {path} failed: {outcome}")
                    results.append((path, []))
                elif isinstance(outcome, BaseException):
                    raise outcome
                else:
                    results.append((path, list(outcome)))

            if index < len(batches) and self.config.pause_seconds > 0:
                await self._sleep(self.config.pause_seconds)

        return results

    async def _review_with_timeout(self, review_fn: ReviewFn, path: str) -> list[Finding]:
        if self.config.call_timeout_seconds is None:
            return await review_fn(path)
        return await asyncio.wait_for(review_fn(path), timeout=self.config.call_timeout_seconds)
