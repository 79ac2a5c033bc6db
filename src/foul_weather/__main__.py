# ABOUTME: CLI entry point for the Foul Weather dispatcher.
# ABOUTME: Provides subcommands: dispatch-batch, dispatch-subscribers, process, schedules, check-registry, serve.

import argparse
import asyncio
import sys

import structlog

from foul_weather.config import get_settings
from foul_weather.logging_setup import configure_logging


async def _dispatch(args: argparse.Namespace) -> int:
    from foul_weather.db.session import close_db
    from foul_weather.dispatch.factory import (
        batch_dispatcher,
        build_pipeline,
        get_registry,
        subscriber_dispatcher,
    )
    from foul_weather.errors import InactiveStrategyError, InfrastructureError

    log = structlog.get_logger()
    settings = get_settings()
    pipeline = build_pipeline(settings)
    registry = get_registry()

    try:
        try:
            if args.command == "dispatch-batch":
                dispatcher = batch_dispatcher(args.index, pipeline, registry, settings)
            else:
                dispatcher = subscriber_dispatcher(pipeline, registry, settings)
        except InactiveStrategyError as e:
            log.error("dispatcher_not_deployed", command=args.command, error=str(e))
            return 2
        except KeyError as e:
            log.error("batch_not_deployed", batch=args.index, error=str(e))
            return 2

        try:
            summary = await dispatcher.dispatch()
        except InfrastructureError as e:
            log.error("dispatch_failed", dispatcher=dispatcher.name, error=str(e))
            return 1

        print(summary.render())
        return 0
    finally:
        await pipeline.source.aclose()
        await close_db()


def cmd_dispatch(args: argparse.Namespace) -> int:
    """Run a static-batch or subscriber dispatcher once."""
    return asyncio.run(_dispatch(args))


async def _process(args: argparse.Namespace) -> int:
    from foul_weather.db.session import close_db
    from foul_weather.dispatch.factory import build_pipeline
    from foul_weather.models import UnitOutcome

    pipeline = build_pipeline(get_settings())
    try:
        result = await pipeline.process(args.wfo, force=args.force)
    finally:
        await pipeline.source.aclose()
        await close_db()

    print(f"{result.wfo_identifier}: {result.outcome.value}")
    if result.audio_uri:
        print(f"  audio: {result.audio_uri}")
    if result.error:
        print(f"  error: {result.error}")
    return 1 if result.outcome == UnitOutcome.FAILED else 0


def cmd_process(args: argparse.Namespace) -> int:
    """Process a single WFO through the pipeline."""
    return asyncio.run(_process(args))


def cmd_schedules(_args: argparse.Namespace) -> int:
    """Print the Cloud Scheduler job table for the deployed dispatch strategy."""
    from foul_weather.dispatch.factory import get_registry

    settings = get_settings()
    for job in get_registry().schedules(settings.deployed_batches, settings.dispatch_strategy):
        path = (
            f"/api/dispatch/batches/{job.batch_index}"
            if job.batch_index is not None
            else "/api/dispatch/subscribers"
        )
        print(f"{job.name:<22} {job.cron:<16} POST {path}")
    return 0


def cmd_check_registry(_args: argparse.Namespace) -> int:
    """Audit batch lists against the office table."""
    from foul_weather.dispatch.factory import get_registry

    issues = get_registry().audit()
    if not issues:
        print("Registry OK")
        return 0

    print(f"\n{len(issues)} registry issue(s):\n")
    for issue in issues:
        print(f"  - {issue}")
    print()
    return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("foul_weather.web.app:app", host=args.host, port=args.port)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="foul_weather",
        description="Foul Weather - forecast discussion rants for every NWS office",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    batch_parser = subparsers.add_parser(
        "dispatch-batch",
        help="Process one static registry batch",
    )
    batch_parser.add_argument("index", type=int, help="Batch index (0-based)")

    subparsers.add_parser(
        "dispatch-subscribers",
        help="Process every WFO referenced by a subscriber",
    )

    process_parser = subparsers.add_parser(
        "process",
        help="Process a single WFO",
    )
    process_parser.add_argument("wfo", type=str, help="WFO code, e.g. TBW")
    process_parser.add_argument(
        "--force",
        action="store_true",
        help="Regenerate even if the discussion has not changed",
    )

    subparsers.add_parser(
        "schedules",
        help="Print the Cloud Scheduler job table",
    )

    subparsers.add_parser(
        "check-registry",
        help="Report inconsistencies between batches and the office table",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
    )
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8080)

    return parser


def main() -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args()

    commands = {
        "dispatch-batch": cmd_dispatch,
        "dispatch-subscribers": cmd_dispatch,
        "process": cmd_process,
        "schedules": cmd_schedules,
        "check-registry": cmd_check_registry,
        "serve": cmd_serve,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
