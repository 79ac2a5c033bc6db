# ABOUTME: Database module for watermark and subscriber persistence.
# ABOUTME: Exports ORM models, repositories, and session helpers.

from foul_weather.db.models import Base, Subscriber, WfoWatermark
from foul_weather.db.repository import SubscriberRepository, WatermarkRepository
from foul_weather.db.session import close_db, get_session

__all__ = [
    "Base",
    "Subscriber",
    "SubscriberRepository",
    "WatermarkRepository",
    "WfoWatermark",
    "close_db",
    "get_session",
]
