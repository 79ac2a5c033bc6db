# ABOUTME: Batch scheduling and bounded fan-out of WFO processing.
# ABOUTME: Exports the pipeline, runner, selectors, dispatcher and factories.

from foul_weather.dispatch.dispatcher import Dispatcher
from foul_weather.dispatch.factory import (
    batch_dispatcher,
    build_pipeline,
    get_pipeline,
    get_registry,
    subscriber_dispatcher,
)
from foul_weather.dispatch.pipeline import ContentPipeline
from foul_weather.dispatch.runner import ConcurrencyLimitedRunner
from foul_weather.dispatch.selection import (
    StaticBatchSelector,
    SubscriberSelector,
    WorkUnitSelector,
)

__all__ = [
    "ConcurrencyLimitedRunner",
    "ContentPipeline",
    "Dispatcher",
    "StaticBatchSelector",
    "SubscriberSelector",
    "WorkUnitSelector",
    "batch_dispatcher",
    "build_pipeline",
    "get_pipeline",
    "get_registry",
    "subscriber_dispatcher",
]
