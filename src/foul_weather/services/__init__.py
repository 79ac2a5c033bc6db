# ABOUTME: Services module initialization.
# ABOUTME: Exports collaborators for storage, notifications, parameters and watermarks.

from foul_weather.services.notifications import NotificationService
from foul_weather.services.parameters import ParameterStore
from foul_weather.services.storage import StorageService
from foul_weather.services.watermark_store import WatermarkStore

__all__ = [
    "NotificationService",
    "ParameterStore",
    "StorageService",
    "WatermarkStore",
]
