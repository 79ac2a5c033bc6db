# ABOUTME: Main package for the Foul Weather dispatcher backend.
# ABOUTME: Exports configuration and the core data models.

from foul_weather.config import get_settings
from foul_weather.models import RunSummary, UnitOutcome, UnitResult, WorkUnit

__all__ = [
    "get_settings",
    "RunSummary",
    "UnitOutcome",
    "UnitResult",
    "WorkUnit",
]
