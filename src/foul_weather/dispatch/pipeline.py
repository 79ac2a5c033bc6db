# ABOUTME: Per-WFO content pipeline: fetch, generate, synthesize, publish, notify.
# ABOUTME: Every per-unit error is caught here and turned into a UnitResult outcome.

import asyncio

import structlog

from foul_weather.ai.service import NarrativeService
from foul_weather.audio import add_wav_header
from foul_weather.config import Settings, get_settings
from foul_weather.errors import (
    ConfigurationError,
    GenerationFailure,
    NoDataError,
    NotStaleError,
    PublishFailure,
)
from foul_weather.models import SourceDocument, UnitOutcome, UnitResult, is_newer
from foul_weather.services.notifications import NotificationService
from foul_weather.services.parameters import ParameterStore
from foul_weather.services.storage import StorageService
from foul_weather.services.watermark_store import WatermarkStore
from foul_weather.sources.nws import ForecastDiscussionClient
from foul_weather.transcript import assign_roles, format_transcript, split_paragraphs

log = structlog.get_logger()

AUDIO_CONTENT_TYPE = "audio/wav"


class ContentPipeline:
    """Turns one WFO's latest forecast discussion into a published audio rant."""

    def __init__(
        self,
        source: ForecastDiscussionClient,
        narrator: NarrativeService,
        storage: StorageService,
        notifier: NotificationService,
        watermarks: WatermarkStore,
        parameters: ParameterStore,
        settings: Settings | None = None,
    ) -> None:
        self.source = source
        self.narrator = narrator
        self.storage = storage
        self.notifier = notifier
        self.watermarks = watermarks
        self.parameters = parameters
        self.settings = settings or get_settings()

    def audio_path(self, wfo_identifier: str) -> str:
        """Storage path of the audio artifact for a WFO."""
        return f"{self.settings.audio_storage_prefix}/{wfo_identifier}.wav"

    async def process(self, wfo_identifier: str, force: bool = False) -> UnitResult:
        """Process one WFO. Never raises for per-unit failures.

        Args:
            wfo_identifier: WFO code, e.g. "TBW".
            force: Ignore the watermark and regenerate even if unchanged.
        """
        wfo = wfo_identifier.strip().upper()
        log.info("processing_wfo", wfo=wfo)

        try:
            return await self._run(wfo, force)
        except NoDataError as e:
            log.warning("wfo_skipped_no_data", wfo=wfo, reason=str(e))
            return UnitResult(wfo_identifier=wfo, outcome=UnitOutcome.SKIPPED_NO_DATA)
        except NotStaleError as e:
            log.info("wfo_skipped_not_newer", wfo=wfo, reason=str(e))
            return UnitResult(wfo_identifier=wfo, outcome=UnitOutcome.SKIPPED_NOT_NEWER)
        except ConfigurationError as e:
            log.error("parameter_missing", wfo=wfo, error=str(e))
            return self._failed(wfo, e)
        except GenerationFailure as e:
            log.warning("generation_failed", wfo=wfo, error=str(e))
            return self._failed(wfo, e)
        except PublishFailure as e:
            log.error("audio_publish_failed", wfo=wfo, error=str(e))
            return self._failed(wfo, e)
        except Exception as e:
            log.exception("wfo_processing_failed", wfo=wfo)
            return self._failed(wfo, e)

    @staticmethod
    def _failed(wfo: str, error: Exception) -> UnitResult:
        return UnitResult(wfo_identifier=wfo, outcome=UnitOutcome.FAILED, error=str(error))

    async def _fetch(self, wfo: str) -> SourceDocument:
        try:
            document = await self.source.fetch_latest(wfo)
        except Exception as e:
            raise NoDataError(f"fetch failed: {e}") from e
        if document is None:
            raise NoDataError("no product available")
        return document

    async def _run(self, wfo: str, force: bool) -> UnitResult:
        document = await self._fetch(wfo)

        if not force:
            watermark = await self.watermarks.get(wfo)
            if not is_newer(document.issuance_time, watermark):
                raise NotStaleError(
                    f"issued {document.issuance_time}, "
                    f"last processed {watermark.last_processed_issuance_time}"
                )

        params = await self.parameters.fetch()
        api_key = params.gemini_api_key.get_secret_value() if params.gemini_api_key else None

        narrative = await self.narrator.generate_narrative(document.text, api_key)
        paragraphs = split_paragraphs(narrative)
        if not paragraphs:
            raise GenerationFailure("narrative contained no paragraphs")
        transcript = format_transcript(
            assign_roles(paragraphs, params.preroll_ad_text, params.postroll_ad_text)
        )

        pcm = await self.narrator.synthesize_speech(transcript, api_key)
        wav = add_wav_header(pcm)

        path = self.audio_path(wfo)
        uri = await asyncio.to_thread(
            self.storage.upload_bytes,
            wav,
            path,
            AUDIO_CONTENT_TYPE,
            self.settings.audio_cache_control,
        )
        if uri is None:
            raise PublishFailure(f"upload to {path} failed")

        # The audio is public now. Recording the watermark and notifying run to
        # completion even if the run deadline cancels this task.
        finish = asyncio.create_task(self._finish(wfo, document, path, uri, len(wav)))
        try:
            return await asyncio.shield(finish)
        except asyncio.CancelledError:
            log.warning("wfo_finishing_past_deadline", wfo=wfo)
            return await finish

    async def _finish(
        self, wfo: str, document: SourceDocument, path: str, uri: str, size: int
    ) -> UnitResult:
        # Only advance after a successful upload so failures are retried next cycle.
        await self.watermarks.set(wfo, document.issuance_time, path)

        notified = await self._notify(wfo)
        log.info(
            "wfo_published",
            wfo=wfo,
            issuance_time=document.issuance_time,
            audio=uri,
            size=size,
            notified=notified,
        )
        return UnitResult(
            wfo_identifier=wfo,
            outcome=UnitOutcome.DONE,
            issuance_time=document.issuance_time,
            audio_uri=uri,
            notified=notified,
        )

    async def _notify(self, wfo: str) -> bool:
        event = self.notifier.build_event(wfo)
        try:
            await asyncio.to_thread(self.notifier.publish, event)
        except Exception as e:
            log.error("notification_failed", wfo=wfo, topic=event.topic, error=str(e))
            return False
        return True
