# ABOUTME: Source-text providers for forecast discussions.
# ABOUTME: Exports the NWS products API client.

from foul_weather.sources.nws import ForecastDiscussionClient

__all__ = ["ForecastDiscussionClient"]
