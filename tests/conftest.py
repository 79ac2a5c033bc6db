# ABOUTME: Pytest fixtures and configuration for Foul Weather tests.
# ABOUTME: Provides test settings, collaborator doubles, and a wired ContentPipeline.

from unittest.mock import AsyncMock, MagicMock

import pytest
from fakes import FOUR_PARAGRAPHS, InMemoryWatermarkStore, StaticSource
from pydantic import SecretStr

from foul_weather.config import Settings
from foul_weather.dispatch.pipeline import ContentPipeline
from foul_weather.models import RunParameters
from foul_weather.services.notifications import NotificationService


@pytest.fixture
def mock_settings() -> Settings:
    """Create settings for testing."""
    return Settings(
        gcp_project="test-project",
        gemini_api_key=SecretStr("test-gemini-key"),
        narrative_model="gemini-test",
        speech_model="gemini-tts-test",
        ai_max_attempts=1,
        nws_base_url="https://api.weather.test",
        gcs_bucket="test-bucket",
        batch_concurrency=3,
        subscriber_concurrency=2,
        dispatch_timeout_seconds=30,
        deployed_batches=[],
        parameter_source="env",
        preroll_ad_text="",
        postroll_ad_text="",
        scheduler_audience="",
        log_level="DEBUG",
    )


@pytest.fixture
def watermarks() -> InMemoryWatermarkStore:
    return InMemoryWatermarkStore()


@pytest.fixture
def source() -> StaticSource:
    return StaticSource({"TBW": "2025-06-01T12:00:00Z"})


@pytest.fixture
def narrator() -> MagicMock:
    """NarrativeService double: four paragraphs of text, 1000 bytes of PCM."""
    narrator = MagicMock()
    narrator.generate_narrative = AsyncMock(return_value=FOUR_PARAGRAPHS)
    narrator.synthesize_speech = AsyncMock(return_value=b"\x01\x02" * 500)
    return narrator


@pytest.fixture
def storage() -> MagicMock:
    """StorageService double that records uploads."""
    storage = MagicMock()
    storage.upload_bytes.side_effect = lambda data, path, *args: f"gs://test-bucket/{path}"
    return storage


@pytest.fixture
def notifier(mock_settings: Settings) -> NotificationService:
    """Real event construction, mocked FCM send."""
    notifier = NotificationService(mock_settings, app=MagicMock())
    notifier.publish = MagicMock(return_value="projects/test/messages/1")
    return notifier


@pytest.fixture
def parameters() -> MagicMock:
    parameters = MagicMock()
    parameters.fetch = AsyncMock(
        return_value=RunParameters(gemini_api_key=SecretStr("test-gemini-key"))
    )
    return parameters


@pytest.fixture
def pipeline(
    mock_settings: Settings,
    source: StaticSource,
    narrator: MagicMock,
    storage: MagicMock,
    notifier: NotificationService,
    watermarks: InMemoryWatermarkStore,
    parameters: MagicMock,
) -> ContentPipeline:
    """ContentPipeline wired to in-memory collaborators."""
    return ContentPipeline(
        source=source,
        narrator=narrator,
        storage=storage,
        notifier=notifier,
        watermarks=watermarks,
        parameters=parameters,
        settings=mock_settings,
    )
