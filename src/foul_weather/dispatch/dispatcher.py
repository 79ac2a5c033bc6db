# ABOUTME: Dispatcher entry point shared by scheduled jobs and the manual trigger.
# ABOUTME: Selects work units with a strategy and hands them to the bounded runner.

import structlog

from foul_weather.dispatch.runner import ConcurrencyLimitedRunner
from foul_weather.dispatch.selection import WorkUnitSelector
from foul_weather.models import RunSummary

log = structlog.get_logger()


class Dispatcher:
    """One dispatcher invocation: select, then process with bounded concurrency."""

    def __init__(self, selector: WorkUnitSelector, runner: ConcurrencyLimitedRunner) -> None:
        self.selector = selector
        self.runner = runner

    @property
    def name(self) -> str:
        return self.selector.name

    async def dispatch(self) -> RunSummary:
        """Run once.

        Raises:
            InfrastructureError: If the work units cannot be selected.
        """
        log.info("dispatch_start", dispatcher=self.name)
        units = await self.selector.select()

        if not units:
            log.warning("dispatch_no_units", dispatcher=self.name)

        summary = await self.runner.run([unit.identifier for unit in units], name=self.name)
        log.info(
            "dispatch_complete",
            dispatcher=self.name,
            total=len(summary.results),
            timed_out=summary.timed_out,
            duration=summary.duration_seconds,
            **summary.counts,
        )
        return summary
