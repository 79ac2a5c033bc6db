# ABOUTME: Strategies for choosing which WFOs a dispatcher run processes.
# ABOUTME: Static registry batches or dynamic discovery over subscriber records.

from abc import ABC, abstractmethod

import structlog

from foul_weather.db.repository import SubscriberRepository
from foul_weather.db.session import get_session
from foul_weather.errors import InfrastructureError
from foul_weather.models import WorkUnit
from foul_weather.registry import BatchRegistry
from foul_weather.services.watermark_store import SessionFactory

log = structlog.get_logger()


class WorkUnitSelector(ABC):
    """Selects the WFOs for one dispatcher run."""

    name: str

    @abstractmethod
    async def select(self) -> list[WorkUnit]:
        """Return the work units to process.

        Raises:
            InfrastructureError: If the set cannot be determined at all.
        """


class StaticBatchSelector(WorkUnitSelector):
    """Selects the offices of one registry batch."""

    def __init__(self, registry: BatchRegistry, batch_index: int) -> None:
        self.registry = registry
        self.batch_index = batch_index
        self.name = f"batch-{batch_index}"

    async def select(self) -> list[WorkUnit]:
        try:
            return self.registry.resolve(self.batch_index)
        except KeyError as e:
            raise InfrastructureError(f"unknown batch {self.batch_index}") from e


class SubscriberSelector(WorkUnitSelector):
    """Selects every distinct WFO referenced by a subscriber."""

    name = "subscribers"

    def __init__(
        self,
        registry: BatchRegistry | None = None,
        session_factory: SessionFactory = get_session,
    ) -> None:
        self.registry = registry or BatchRegistry()
        self.session_factory = session_factory

    async def select(self) -> list[WorkUnit]:
        try:
            async with self.session_factory() as session:
                codes = await SubscriberRepository(session).list_distinct_wfo_identifiers()
        except Exception as e:
            log.exception("subscriber_discovery_failed")
            raise InfrastructureError(f"cannot read subscribers: {e}") from e

        units = []
        for code in dict.fromkeys(codes):
            name = self.registry.offices.get(code)
            if name is None:
                log.warning("subscriber_wfo_not_in_registry", wfo=code)
            units.append(WorkUnit(identifier=code, display_name=name))

        log.info("subscriber_wfos_discovered", count=len(units))
        return units
