# ABOUTME: FastAPI dependency injection for the pipeline, registry and settings.
# ABOUTME: Route handlers receive collaborators here so tests can override them.

from typing import Annotated

from fastapi import Depends

from foul_weather.config import Settings, get_settings
from foul_weather.dispatch.factory import get_pipeline, get_registry
from foul_weather.dispatch.pipeline import ContentPipeline
from foul_weather.registry import BatchRegistry

AppSettings = Annotated[Settings, Depends(get_settings)]
Pipeline = Annotated[ContentPipeline, Depends(get_pipeline)]
Registry = Annotated[BatchRegistry, Depends(get_registry)]
