# ABOUTME: Tests for storage, notification, parameter and watermark services.
# ABOUTME: External Google clients and database sessions are mocked.

from unittest.mock import AsyncMock, MagicMock, patch

from fakes import session_factory_for
from google.api_core import exceptions as google_exceptions
from pydantic import SecretStr
from sqlalchemy.dialects import postgresql

from foul_weather.config import Settings
from foul_weather.db.models import WfoWatermark
from foul_weather.services.notifications import NotificationService
from foul_weather.services.parameters import ParameterStore
from foul_weather.services.storage import StorageService
from foul_weather.services.watermark_store import WatermarkStore


class TestStorageService:
    """Tests for StorageService."""

    def test_disabled_without_bucket(self) -> None:
        service = StorageService(None)

        assert service.is_enabled is False
        assert service.upload_bytes(b"data", "sarcastic_summaries/TBW.wav") is None

    def test_upload_sets_metadata(self) -> None:
        client = MagicMock()
        blob = client.bucket.return_value.blob.return_value

        service = StorageService("wx-bucket", client=client)
        uri = service.upload_bytes(
            b"RIFF", "sarcastic_summaries/TBW.wav", "audio/wav", "public,max-age=3600"
        )

        assert uri == "gs://wx-bucket/sarcastic_summaries/TBW.wav"
        client.bucket.assert_called_once_with("wx-bucket")
        client.bucket.return_value.blob.assert_called_once_with("sarcastic_summaries/TBW.wav")
        assert blob.cache_control == "public,max-age=3600"
        blob.upload_from_string.assert_called_once_with(b"RIFF", content_type="audio/wav")

    def test_upload_failure_returns_none(self) -> None:
        client = MagicMock()
        client.bucket.return_value.blob.return_value.upload_from_string.side_effect = (
            RuntimeError("403")
        )

        service = StorageService("wx-bucket", client=client)

        assert service.upload_bytes(b"RIFF", "sarcastic_summaries/TBW.wav") is None


class TestNotificationService:
    """Tests for NotificationService."""

    def test_build_event(self, mock_settings: Settings) -> None:
        event = NotificationService(mock_settings, app=MagicMock()).build_event("TBW")

        assert event.topic == "wfo_TBW"
        assert event.title == mock_settings.notification_title
        assert event.body == mock_settings.notification_body

    def test_publish_sends_topic_message(self, mock_settings: Settings) -> None:
        app = MagicMock()
        service = NotificationService(mock_settings, app=app)

        with patch(
            "foul_weather.services.notifications.messaging.send", return_value="msg-1"
        ) as send:
            message_id = service.publish(service.build_event("TBW"))

        assert message_id == "msg-1"
        message = send.call_args.args[0]
        assert message.topic == "wfo_TBW"
        assert message.data == {"wfoId": "TBW", "audioReady": "true"}
        assert message.notification.title == mock_settings.notification_title
        assert send.call_args.kwargs["app"] is app

    def test_app_uses_existing_default(self, mock_settings: Settings) -> None:
        existing = MagicMock()
        with patch(
            "foul_weather.services.notifications.firebase_admin.get_app", return_value=existing
        ):
            assert NotificationService(mock_settings).app is existing

    def test_app_initialized_when_missing(self, mock_settings: Settings) -> None:
        created = MagicMock()
        with (
            patch(
                "foul_weather.services.notifications.firebase_admin.get_app",
                side_effect=ValueError("no app"),
            ),
            patch(
                "foul_weather.services.notifications.firebase_admin.initialize_app",
                return_value=created,
            ) as initialize,
        ):
            assert NotificationService(mock_settings).app is created

        initialize.assert_called_once_with(options={"projectId": "test-project"})


def _secret(value: str) -> MagicMock:
    response = MagicMock()
    response.payload.data = value.encode("UTF-8")
    return response


class TestParameterStore:
    """Tests for ParameterStore."""

    async def test_env_source_uses_settings(self, mock_settings: Settings) -> None:
        client = MagicMock()
        store = ParameterStore(mock_settings, client=client)

        params = await store.fetch()

        assert params.gemini_api_key.get_secret_value() == "test-gemini-key"
        assert params.preroll_ad_text == ""
        client.access_secret_version.assert_not_called()

    async def test_secret_manager_values(self, mock_settings: Settings) -> None:
        settings = mock_settings.model_copy(update={"parameter_source": "secret_manager"})
        secrets = {
            "gemini-api-key": "sm-key\n",
            "preroll-ad-text": "Buy fans.",
            "postroll-ad-text": "Stay dry.",
        }
        client = MagicMock()
        client.access_secret_version.side_effect = lambda name: _secret(
            secrets[name.split("/")[3]]
        )

        params = await ParameterStore(settings, client=client).fetch()

        assert params.gemini_api_key.get_secret_value() == "sm-key"
        assert params.preroll_ad_text == "Buy fans."
        assert params.postroll_ad_text == "Stay dry."
        client.access_secret_version.assert_any_call(
            name="projects/test-project/secrets/gemini-api-key/versions/latest"
        )

    async def test_missing_secret_falls_back(self, mock_settings: Settings) -> None:
        settings = mock_settings.model_copy(
            update={"parameter_source": "secret_manager", "postroll_ad_text": "Default bye."}
        )

        def access(name: str) -> MagicMock:
            if "gemini-api-key" in name:
                return _secret("sm-key")
            raise google_exceptions.NotFound("missing")

        client = MagicMock()
        client.access_secret_version.side_effect = access

        params = await ParameterStore(settings, client=client).fetch()

        assert params.gemini_api_key == SecretStr("sm-key")
        assert params.preroll_ad_text == ""
        assert params.postroll_ad_text == "Default bye."

    async def test_no_project_skips_secret_manager(self, mock_settings: Settings) -> None:
        settings = mock_settings.model_copy(
            update={"parameter_source": "secret_manager", "gcp_project": ""}
        )
        client = MagicMock()

        params = await ParameterStore(settings, client=client).fetch()

        assert params.gemini_api_key.get_secret_value() == "test-gemini-key"
        client.access_secret_version.assert_not_called()


class TestWatermarkStore:
    """Tests for the database-backed WatermarkStore."""

    async def test_get_missing(self) -> None:
        session = AsyncMock()
        session.get.return_value = None

        store = WatermarkStore(session_factory_for(session))

        assert await store.get("TBW") is None
        session.get.assert_awaited_once_with(WfoWatermark, "TBW")

    async def test_get_existing(self) -> None:
        session = AsyncMock()
        session.get.return_value = WfoWatermark(
            wfo_identifier="TBW",
            last_processed_issuance_time="2025-06-01T12:00:00Z",
            audio_path="sarcastic_summaries/TBW.wav",
        )

        watermark = await WatermarkStore(session_factory_for(session)).get("TBW")

        assert watermark.last_processed_issuance_time == "2025-06-01T12:00:00Z"
        assert watermark.audio_path == "sarcastic_summaries/TBW.wav"

    async def test_set_is_merge_upsert(self) -> None:
        session = AsyncMock()

        await WatermarkStore(session_factory_for(session)).set(
            "TBW", "2025-06-01T12:00:00Z", "sarcastic_summaries/TBW.wav"
        )

        stmt = session.execute.await_args.args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert "INSERT INTO wfo_watermarks" in sql
        assert "ON CONFLICT (wfo_identifier) DO UPDATE" in sql
        assert "audio_path" in sql.split("DO UPDATE")[1]

    async def test_set_without_path_leaves_column(self) -> None:
        session = AsyncMock()

        await WatermarkStore(session_factory_for(session)).set("TBW", "2025-06-01T12:00:00Z")

        stmt = session.execute.await_args.args[0]
        update_clause = str(stmt.compile(dialect=postgresql.dialect())).split("DO UPDATE")[1]
        assert "last_processed_issuance_time" in update_clause
        assert "audio_path" not in update_clause
