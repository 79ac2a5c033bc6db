# ABOUTME: Middleware package for authentication.
# ABOUTME: Exports the OIDC verification dependency.

from foul_weather.web.middleware.oidc import SchedulerCaller, verify_scheduler_token

__all__ = ["SchedulerCaller", "verify_scheduler_token"]
