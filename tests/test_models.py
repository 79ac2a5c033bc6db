# ABOUTME: Tests for pipeline data models.
# ABOUTME: Covers the watermark comparison rule, notification payloads and run summaries.

from datetime import UTC, datetime, timedelta

import pytest

from foul_weather.models import (
    Batch,
    NotificationEvent,
    RunSummary,
    UnitOutcome,
    UnitResult,
    Watermark,
    is_newer,
)


def _watermark(ts: str) -> Watermark:
    return Watermark(wfo_identifier="TBW", last_processed_issuance_time=ts)


class TestIsNewer:
    """Tests for the strictly-newer watermark rule."""

    def test_no_watermark_is_newer(self) -> None:
        assert is_newer("2025-06-01T12:00:00Z", None) is True

    @pytest.mark.parametrize(
        ("candidate", "stored", "expected"),
        [
            ("2025-06-01T12:00:00Z", "2025-06-01T06:00:00Z", True),
            ("2025-06-01T12:00:00Z", "2025-06-01T12:00:00Z", False),
            ("2025-06-01T06:00:00Z", "2025-06-01T12:00:00Z", False),
            ("2025-06-01T12:00:00+00:00", "2025-06-01T12:00:00Z", False),
            ("2025-06-01T08:00:00-04:00", "2025-06-01T11:00:00Z", True),
            ("2025-06-01T08:00:00-04:00", "2025-06-01T12:00:00Z", False),
        ],
    )
    def test_iso_instants(self, candidate: str, stored: str, expected: bool) -> None:
        assert is_newer(candidate, _watermark(stored)) is expected

    def test_non_iso_falls_back_to_string_order(self) -> None:
        assert is_newer("b", _watermark("a")) is True
        assert is_newer("a", _watermark("a")) is False
        assert is_newer("2025-06-01T12:00:00Z", _watermark("garbage")) is False

    def test_naive_timestamp_treated_as_utc(self) -> None:
        assert is_newer("2025-06-01T12:00:00", _watermark("2025-06-01T12:00:00Z")) is False
        assert is_newer("2025-06-01T12:00:01", _watermark("2025-06-01T12:00:00Z")) is True


class TestBatch:
    def test_cron_fires_twice_an_hour(self) -> None:
        batch = Batch(index=7, minute_offset=7, office_codes=[])

        assert batch.cron == "7,37 * * * *"


class TestNotificationEvent:
    def test_data_payload_is_strings(self) -> None:
        event = NotificationEvent(wfo_identifier="TBW", topic="wfo_TBW", title="t", body="b")

        assert event.data == {"wfoId": "TBW", "audioReady": "true"}


class TestRunSummary:
    """Tests for RunSummary aggregation and rendering."""

    def _summary(self, *outcomes: UnitOutcome, timed_out: bool = False) -> RunSummary:
        return RunSummary(
            name="batch-2",
            results=[
                UnitResult(wfo_identifier=f"W{i}", outcome=outcome)
                for i, outcome in enumerate(outcomes)
            ],
            timed_out=timed_out,
        )

    def test_counts_include_every_outcome(self) -> None:
        summary = self._summary(UnitOutcome.DONE, UnitOutcome.DONE, UnitOutcome.FAILED)

        assert summary.counts == {
            "done": 2,
            "skipped_no_data": 0,
            "skipped_not_newer": 0,
            "failed": 1,
            "abandoned": 0,
        }

    def test_render_completed(self) -> None:
        summary = self._summary(
            UnitOutcome.DONE, UnitOutcome.SKIPPED_NOT_NEWER, UnitOutcome.SKIPPED_NOT_NEWER
        )

        assert summary.render() == (
            "batch-2 completed: 3 WFOs processed (done=1, skipped_not_newer=2)"
        )

    def test_render_timed_out(self) -> None:
        summary = self._summary(UnitOutcome.DONE, UnitOutcome.ABANDONED, timed_out=True)

        assert summary.render() == "batch-2 timed out: 2 WFOs processed (done=1, abandoned=1)"

    def test_duration(self) -> None:
        started = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
        summary = RunSummary(
            name="x", started_at=started, finished_at=started + timedelta(seconds=90)
        )

        assert summary.duration_seconds == 90.0
        assert RunSummary(name="y").duration_seconds is None
