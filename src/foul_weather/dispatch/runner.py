# ABOUTME: Bounded-concurrency runner that drains a list of WFOs through the pipeline.
# ABOUTME: FIFO admission, at most N in flight, per-unit failure isolation, optional deadline.

import asyncio
from datetime import UTC, datetime

import structlog

from foul_weather.dispatch.pipeline import ContentPipeline
from foul_weather.models import RunSummary, UnitOutcome, UnitResult

log = structlog.get_logger()


class ConcurrencyLimitedRunner:
    """Runs ContentPipeline for many WFOs with at most `concurrency` in flight."""

    def __init__(
        self,
        pipeline: ContentPipeline,
        concurrency: int,
        timeout_seconds: float | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.pipeline = pipeline
        self.concurrency = concurrency
        self.timeout_seconds = timeout_seconds

    async def run(self, wfo_identifiers: list[str], name: str = "run") -> RunSummary:
        """Process every WFO exactly once and wait for all of them.

        Identifiers are compared case-insensitively, ignoring surrounding
        whitespace. Units still pending or in flight when the deadline passes
        are reported as abandoned, unless their audio was already published.
        """
        units = list(dict.fromkeys(wfo.strip().upper() for wfo in wfo_identifiers))
        summary = RunSummary(name=name)
        results: dict[str, UnitResult] = {}
        semaphore = asyncio.Semaphore(self.concurrency)

        log.info("batch_start", run=name, units=len(units), concurrency=self.concurrency)

        async def _run(wfo: str) -> None:
            async with semaphore:
                try:
                    results[wfo] = await self.pipeline.process(wfo)
                except Exception as e:
                    log.exception("wfo_task_crashed", wfo=wfo)
                    results[wfo] = UnitResult(
                        wfo_identifier=wfo, outcome=UnitOutcome.FAILED, error=str(e)
                    )

        try:
            async with asyncio.timeout(self.timeout_seconds):
                async with asyncio.TaskGroup() as group:
                    for wfo in units:
                        group.create_task(_run(wfo))
        except TimeoutError:
            summary.timed_out = True
            log.error(
                "dispatch_timeout",
                run=name,
                timeout=self.timeout_seconds,
                finished=len(results),
                abandoned=len(units) - len(results),
            )

        summary.results = [
            results.get(wfo) or UnitResult(wfo_identifier=wfo, outcome=UnitOutcome.ABANDONED)
            for wfo in units
        ]
        summary.finished_at = datetime.now(UTC)
        log.info("batch_finished", run=name, **summary.counts)
        return summary
