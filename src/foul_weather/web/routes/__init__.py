# ABOUTME: Web routes package.
# ABOUTME: Exports the API router module.

from foul_weather.web.routes import api

__all__ = ["api"]
