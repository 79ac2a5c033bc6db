# ABOUTME: API routes for Cloud Scheduler dispatchers and the manual trigger.
# ABOUTME: Endpoints for static batches, the subscriber sweep, single WFOs and health.

import structlog
from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from foul_weather.dispatch.dispatcher import Dispatcher
from foul_weather.dispatch.factory import batch_dispatcher, subscriber_dispatcher
from foul_weather.errors import InactiveStrategyError, InfrastructureError
from foul_weather.models import UnitResult
from foul_weather.web.dependencies import AppSettings, Pipeline, Registry
from foul_weather.web.middleware.oidc import SchedulerCaller

router = APIRouter(prefix="/api", tags=["api"])
log = structlog.get_logger()


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    version: str = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint for load balancer."""
    return HealthResponse(status="healthy")


async def _run_dispatcher(dispatcher: Dispatcher) -> PlainTextResponse:
    """Run a dispatcher to completion and render the outcome as plain text."""
    try:
        summary = await dispatcher.dispatch()
    except InfrastructureError as e:
        log.error("dispatch_failed", dispatcher=dispatcher.name, error=str(e))
        return PlainTextResponse(f"{dispatcher.name} failed: {e}", status_code=500)
    return PlainTextResponse(summary.render(), status_code=200)


@router.post("/dispatch/batches/{batch_index}", response_class=PlainTextResponse)
async def api_dispatch_batch(
    batch_index: int,
    _caller: SchedulerCaller,
    pipeline: Pipeline,
    registry: Registry,
    settings: AppSettings,
):
    """Process one static registry batch.

    Called by Cloud Scheduler at the batch's minute offset, twice per hour.
    """
    try:
        dispatcher = batch_dispatcher(batch_index, pipeline, registry, settings)
    except InactiveStrategyError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Batch {batch_index} is not deployed") from e

    log.info("api_dispatch_batch_triggered", batch=batch_index)
    return await _run_dispatcher(dispatcher)


@router.post("/dispatch/subscribers", response_class=PlainTextResponse)
async def api_dispatch_subscribers(
    _caller: SchedulerCaller,
    pipeline: Pipeline,
    registry: Registry,
    settings: AppSettings,
):
    """Process every WFO referenced by a subscriber.

    Called by Cloud Scheduler every 30 minutes when the subscriber strategy is deployed.
    """
    try:
        dispatcher = subscriber_dispatcher(pipeline, registry, settings)
    except InactiveStrategyError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    log.info("api_dispatch_subscribers_triggered")
    return await _run_dispatcher(dispatcher)


@router.api_route("/trigger", methods=["GET", "POST"], response_class=PlainTextResponse)
async def api_manual_trigger(
    _caller: SchedulerCaller,
    pipeline: Pipeline,
    registry: Registry,
    settings: AppSettings,
):
    """Run subscriber discovery and processing now, returning when everything is done."""
    log.info("api_manual_trigger")
    return await _run_dispatcher(subscriber_dispatcher(pipeline, registry, settings, manual=True))


@router.post("/wfo/{wfo_identifier}", response_model=UnitResult)
async def api_process_wfo(wfo_identifier: str, _caller: SchedulerCaller, pipeline: Pipeline):
    """Process a single WFO through the pipeline."""
    log.info("api_process_wfo_triggered", wfo=wfo_identifier)
    return await pipeline.process(wfo_identifier)
