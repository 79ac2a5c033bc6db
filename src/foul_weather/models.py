# ABOUTME: Pydantic models for the WFO processing pipeline.
# ABOUTME: Defines work units, watermarks, source documents, transcripts and run summaries.

from collections import Counter
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, SecretStr


class WorkUnit(BaseModel):
    """A single Weather Forecast Office."""

    identifier: str
    display_name: str | None = None


class SourceDocument(BaseModel):
    """Latest forecast discussion fetched for a WFO."""

    wfo_identifier: str
    text: str
    issuance_time: str


class Watermark(BaseModel):
    """Last processed issuance time for a WFO."""

    wfo_identifier: str
    last_processed_issuance_time: str
    audio_path: str | None = None
    updated_at: datetime | None = None


def _parse_timestamp(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def is_newer(issuance_time: str, watermark: Watermark | None) -> bool:
    """Check whether an issuance time is strictly newer than the watermark.

    Both values are compared as instants when they parse as ISO-8601,
    otherwise as plain strings.
    """
    if watermark is None:
        return True
    stored = watermark.last_processed_issuance_time
    candidate_ts = _parse_timestamp(issuance_time)
    stored_ts = _parse_timestamp(stored)
    if candidate_ts is not None and stored_ts is not None:
        return candidate_ts > stored_ts
    return issuance_time > stored


class SpeakerRole(str, Enum):
    """The two alternating voices of a transcript."""

    A = "Speaker1"
    B = "Speaker2"


class TranscriptSegment(BaseModel):
    """One paragraph of the transcript with its assigned speaker."""

    role: SpeakerRole
    text: str
    promo: bool = False


class Batch(BaseModel):
    """A static group of offices handled by one scheduled dispatcher."""

    index: int
    minute_offset: int
    office_codes: list[str]

    @property
    def cron(self) -> str:
        """Twice-hourly cron expression for this batch."""
        return f"{self.minute_offset},{self.minute_offset + 30} * * * *"


class NotificationEvent(BaseModel):
    """Push message announcing a fresh audio summary for a WFO."""

    wfo_identifier: str
    topic: str
    title: str
    body: str
    audio_ready: bool = True

    @property
    def data(self) -> dict[str, str]:
        """FCM data payload (string values only)."""
        return {"wfoId": self.wfo_identifier, "audioReady": str(self.audio_ready).lower()}


class RunParameters(BaseModel):
    """Parameters fetched fresh from the configuration store for each run."""

    gemini_api_key: SecretStr | None = None
    preroll_ad_text: str = ""
    postroll_ad_text: str = ""


class UnitOutcome(str, Enum):
    """Terminal state of a WFO within one run."""

    DONE = "done"
    SKIPPED_NO_DATA = "skipped_no_data"
    SKIPPED_NOT_NEWER = "skipped_not_newer"
    FAILED = "failed"
    ABANDONED = "abandoned"


class UnitResult(BaseModel):
    """Result of processing one WFO."""

    wfo_identifier: str
    outcome: UnitOutcome
    issuance_time: str | None = None
    audio_uri: str | None = None
    notified: bool = False
    error: str | None = None


class RunSummary(BaseModel):
    """Aggregate result of one dispatcher invocation."""

    name: str
    results: list[UnitResult] = Field(default_factory=list)
    timed_out: bool = False
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    @property
    def counts(self) -> dict[str, int]:
        """Number of units per outcome."""
        counter = Counter(result.outcome.value for result in self.results)
        return {outcome.value: counter.get(outcome.value, 0) for outcome in UnitOutcome}

    @property
    def duration_seconds(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def render(self) -> str:
        """Plain-text summary for HTTP responses and the CLI."""
        counts = ", ".join(f"{key}={value}" for key, value in self.counts.items() if value)
        status = "timed out" if self.timed_out else "completed"
        return f"{self.name} {status}: {len(self.results)} WFOs processed ({counts or 'none'})"
