# ABOUTME: Google Gemini service for narrative text and multi-speaker speech.
# ABOUTME: Async calls with tenacity retries; failures surface as GenerationFailure.

import base64
import re

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from foul_weather.ai.prompts import NARRATIVE_SYSTEM_PROMPT, SPEECH_PREAMBLE
from foul_weather.config import Settings, get_settings
from foul_weather.errors import ConfigurationError, GenerationFailure
from foul_weather.models import SpeakerRole

log = structlog.get_logger()

_FENCE_START = re.compile(r"^```(?:json|text)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")


def _log_retry(retry_state: RetryCallState) -> None:
    log.warning(
        "api_retry",
        attempt=retry_state.attempt_number,
        wait=retry_state.next_action.sleep if retry_state.next_action else None,
    )


def strip_markdown_fences(text: str) -> str:
    """Remove a leading/trailing markdown code fence from an LLM response."""
    return _FENCE_END.sub("", _FENCE_START.sub("", text.strip())).strip()


class NarrativeService:
    """Generates the forecast rant and renders it as two-voice audio."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._clients: dict[str, genai.Client] = {}

    def client_for(self, api_key: str | None) -> genai.Client:
        """Get a Gemini client for the given key (cached per key)."""
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is required")
        if api_key not in self._clients:
            self._clients[api_key] = genai.Client(api_key=api_key)
        return self._clients[api_key]

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(genai_errors.APIError),
            stop=stop_after_attempt(max(1, self.settings.ai_max_attempts)),
            wait=wait_exponential(multiplier=1, min=2, max=30),
            before_sleep=_log_retry,
            reraise=True,
        )

    async def generate_narrative(self, source_text: str, api_key: str | None) -> str:
        """Turn a raw forecast discussion into the rant text.

        Raises:
            ConfigurationError: If no API key is available.
            GenerationFailure: If the model errors or returns nothing.
        """
        client = self.client_for(api_key)
        config = types.GenerateContentConfig(
            temperature=self.settings.narrative_temperature,
            max_output_tokens=self.settings.narrative_max_output_tokens,
            system_instruction=NARRATIVE_SYSTEM_PROMPT,
        )
        log.debug("generating_narrative", model=self.settings.narrative_model, length=len(source_text))

        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await client.aio.models.generate_content(
                        model=self.settings.narrative_model,
                        contents=source_text,
                        config=config,
                    )
        except genai_errors.APIError as e:
            raise GenerationFailure(f"narrative generation failed: {e}") from e

        text = strip_markdown_fences(response.text or "")
        if not text:
            raise GenerationFailure("narrative generation returned empty text")

        log.debug("narrative_generated", length=len(text))
        return text

    def _speech_config(self) -> types.SpeechConfig:
        voices = {
            SpeakerRole.A: self.settings.speaker_a_voice,
            SpeakerRole.B: self.settings.speaker_b_voice,
        }
        return types.SpeechConfig(
            multi_speaker_voice_config=types.MultiSpeakerVoiceConfig(
                speaker_voice_configs=[
                    types.SpeakerVoiceConfig(
                        speaker=role.value,
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice),
                        ),
                    )
                    for role, voice in voices.items()
                ]
            )
        )

    async def synthesize_speech(self, transcript: str, api_key: str | None) -> bytes:
        """Render a two-speaker transcript to raw 24 kHz mono 16-bit PCM.

        Raises:
            ConfigurationError: If no API key is available.
            GenerationFailure: If the model errors or returns no audio.
        """
        client = self.client_for(api_key)
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=self._speech_config(),
        )
        log.info("tts_input", characters=len(transcript))

        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await client.aio.models.generate_content(
                        model=self.settings.speech_model,
                        contents=SPEECH_PREAMBLE + transcript,
                        config=config,
                    )
        except genai_errors.APIError as e:
            raise GenerationFailure(f"speech synthesis failed: {e}") from e

        audio = self._extract_audio(response)
        if not audio:
            raise GenerationFailure("speech synthesis returned no audio")
        return audio

    @staticmethod
    def _extract_audio(response: types.GenerateContentResponse) -> bytes | None:
        candidates = response.candidates or []
        if not candidates or candidates[0].content is None:
            return None
        for part in candidates[0].content.parts or []:
            inline = part.inline_data
            if inline is not None and inline.data:
                data = inline.data
                # The SDK usually decodes for us; raw REST payloads are base64 text.
                return base64.b64decode(data) if isinstance(data, str) else bytes(data)
        return None
