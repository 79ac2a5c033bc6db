# ABOUTME: Wiring of pipeline collaborators and dispatcher construction.
# ABOUTME: Builds production instances from Settings; tests inject their own.

from functools import lru_cache

import structlog

from foul_weather.ai.service import NarrativeService
from foul_weather.config import Settings, get_settings
from foul_weather.dispatch.dispatcher import Dispatcher
from foul_weather.dispatch.pipeline import ContentPipeline
from foul_weather.dispatch.runner import ConcurrencyLimitedRunner
from foul_weather.dispatch.selection import StaticBatchSelector, SubscriberSelector
from foul_weather.errors import InactiveStrategyError
from foul_weather.registry import BatchRegistry
from foul_weather.services.notifications import NotificationService
from foul_weather.services.parameters import ParameterStore
from foul_weather.services.storage import StorageService
from foul_weather.services.watermark_store import WatermarkStore
from foul_weather.sources.nws import ForecastDiscussionClient

log = structlog.get_logger()


def build_pipeline(settings: Settings | None = None) -> ContentPipeline:
    """Create a ContentPipeline backed by the real collaborators."""
    settings = settings or get_settings()
    return ContentPipeline(
        source=ForecastDiscussionClient(settings),
        narrator=NarrativeService(settings),
        storage=StorageService(settings.gcs_bucket),
        notifier=NotificationService(settings),
        watermarks=WatermarkStore(),
        parameters=ParameterStore(settings),
        settings=settings,
    )


@lru_cache
def get_pipeline() -> ContentPipeline:
    """Process-wide pipeline (clients are reused across dispatches)."""
    return build_pipeline()


@lru_cache
def get_registry() -> BatchRegistry:
    return BatchRegistry()


def _require_strategy(settings: Settings, strategy: str) -> None:
    if settings.dispatch_strategy != strategy:
        log.warning(
            "dispatch_strategy_inactive", requested=strategy, active=settings.dispatch_strategy
        )
        raise InactiveStrategyError(
            f"Dispatch strategy is {settings.dispatch_strategy!r}, not {strategy!r}"
        )


def batch_dispatcher(
    batch_index: int,
    pipeline: ContentPipeline,
    registry: BatchRegistry,
    settings: Settings | None = None,
) -> Dispatcher:
    """Static-batch dispatcher for one deployed registry batch.

    Raises:
        InactiveStrategyError: If the subscriber sweep is the deployed strategy.
        KeyError: If the batch does not exist or is not deployed.
    """
    settings = settings or get_settings()
    _require_strategy(settings, "batches")
    deployed = {batch.index for batch in registry.deployed(settings.deployed_batches)}
    if batch_index not in deployed:
        raise KeyError(f"Batch {batch_index} is not deployed")

    runner = ConcurrencyLimitedRunner(
        pipeline,
        concurrency=settings.batch_concurrency,
        timeout_seconds=settings.dispatch_timeout_seconds,
    )
    return Dispatcher(StaticBatchSelector(registry, batch_index), runner)


def subscriber_dispatcher(
    pipeline: ContentPipeline,
    registry: BatchRegistry,
    settings: Settings | None = None,
    manual: bool = False,
) -> Dispatcher:
    """Dynamic-discovery dispatcher over every subscribed WFO.

    Scheduled sweeps only run under the subscriber strategy; a manual trigger
    runs under either.

    Raises:
        InactiveStrategyError: If static batches are the deployed strategy and
            this is not a manual run.
    """
    settings = settings or get_settings()
    if not manual:
        _require_strategy(settings, "subscribers")
    runner = ConcurrencyLimitedRunner(
        pipeline,
        concurrency=settings.subscriber_concurrency,
        timeout_seconds=settings.dispatch_timeout_seconds,
    )
    return Dispatcher(SubscriberSelector(registry), runner)
