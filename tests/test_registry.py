# ABOUTME: Tests for the static office registry and batch resolution.
# ABOUTME: Covers the code-keyed batch table, scheduler jobs per strategy and the audit.

from itertools import combinations

import pytest

from foul_weather.registry import (
    BATCH_OFFICES,
    OFFICES,
    SUBSCRIBER_SWEEP_CRON,
    SUBSCRIBER_SWEEP_JOB,
    BatchRegistry,
    ScheduledJob,
)


@pytest.fixture
def registry() -> BatchRegistry:
    return BatchRegistry()


def _firing_minutes(cron: str) -> set[int]:
    field = cron.split()[0]
    if field.startswith("*/"):
        return set(range(0, 60, int(field[2:])))
    return {int(minute) for minute in field.split(",")}


def _job_units(registry: BatchRegistry, job: ScheduledJob) -> set[str]:
    # The sweep may reach any office that has a subscriber.
    if job.batch_index is None:
        return set(registry.offices)
    return {unit.identifier for unit in registry.resolve(job.batch_index)}


class TestResolve:
    """Tests for resolving batches to work units."""

    def test_twenty_one_batches(self, registry: BatchRegistry) -> None:
        assert len(registry.batches) == 21
        assert len(BATCH_OFFICES) == 21

    def test_first_batch_in_order(self, registry: BatchRegistry) -> None:
        units = registry.resolve(0)

        assert [u.identifier for u in units] == ["AKQ", "ABR", "ABQ", "BOI", "AFC", "HFO"]
        assert units[0].display_name == "Wakefield"

    def test_omaha_is_dispatched(self, registry: BatchRegistry) -> None:
        units = registry.resolve(20)

        assert [u.identifier for u in units] == ["JAN", "OAX", "OHX", "OUN", "TSA", "SGF"]
        assert units[1].display_name == "Omaha/Valley"

    def test_tampa_bay_batch(self, registry: BatchRegistry) -> None:
        assert "TBW" in [u.identifier for u in registry.resolve(15)]

    def test_unknown_batch(self, registry: BatchRegistry) -> None:
        with pytest.raises(KeyError):
            registry.resolve(99)
        with pytest.raises(KeyError):
            registry.get_batch(-1)

    def test_unknown_code_is_excluded(self) -> None:
        registry = BatchRegistry(offices={"TBW": "Tampa Bay Area"}, batch_offices=[["TBW", "XYZ"]])

        assert [u.identifier for u in registry.resolve(0)] == ["TBW"]

    def test_batch_with_no_valid_offices(self) -> None:
        registry = BatchRegistry(offices={"TBW": "Tampa Bay Area"}, batch_offices=[["XYZ"]])

        assert registry.resolve(0) == []

    def test_every_office_in_exactly_one_batch(self) -> None:
        codes = [code for batch in BATCH_OFFICES for code in batch]

        assert len(OFFICES) == 121
        assert sorted(codes) == sorted(OFFICES)
        assert all(len(code) == 3 and code.isupper() for code in OFFICES)


class TestSchedules:
    """Tests for scheduler job derivation."""

    def test_cron_uses_batch_index_offset(self, registry: BatchRegistry) -> None:
        assert registry.get_batch(15).cron == "15,45 * * * *"
        assert registry.get_batch(0).cron == "0,30 * * * *"

    def test_selected_batches(self, registry: BatchRegistry) -> None:
        jobs = registry.schedules([19, 15])

        assert [(job.name, job.cron, job.batch_index) for job in jobs] == [
            ("summary-batch-15", "15,45 * * * *", 15),
            ("summary-batch-19", "19,49 * * * *", 19),
        ]

    def test_empty_selection_means_all(self, registry: BatchRegistry) -> None:
        jobs = registry.schedules([])

        assert len(jobs) == 21
        assert SUBSCRIBER_SWEEP_JOB not in [job.name for job in jobs]
        assert [b.index for b in registry.deployed(None)] == list(range(21))

    def test_subscriber_strategy_is_sweep_only(self, registry: BatchRegistry) -> None:
        jobs = registry.schedules([15], strategy="subscribers")

        assert jobs == [ScheduledJob(name=SUBSCRIBER_SWEEP_JOB, cron=SUBSCRIBER_SWEEP_CRON)]

    @pytest.mark.parametrize("strategy", ["batches", "subscribers"])
    def test_no_overlapping_units_fire_together(
        self, registry: BatchRegistry, strategy: str
    ) -> None:
        """Jobs that share a firing minute never share a WFO."""
        jobs = registry.schedules([], strategy=strategy)

        for first, second in combinations(jobs, 2):
            if _firing_minutes(first.cron) & _firing_minutes(second.cron):
                shared = _job_units(registry, first) & _job_units(registry, second)
                assert not shared, f"{first.name} and {second.name} both run {sorted(shared)}"

    def test_unknown_deployed_batch(self, registry: BatchRegistry) -> None:
        with pytest.raises(KeyError):
            registry.deployed([3, 40])


class TestAudit:
    """Tests for the registry consistency audit."""

    def test_shipped_registry_is_clean(self, registry: BatchRegistry) -> None:
        assert registry.audit() == []

    def test_reports_table_issues(self) -> None:
        registry = BatchRegistry(
            offices={"TBW": "Tampa Bay Area", "MFL": "Miami", "HGX": "Houston/Galveston"},
            batch_offices=[["TBW", "MFL"], ["MFL", "XYZ"]],
        )

        issues = registry.audit()

        assert "batch 1: unknown office code 'XYZ'" in issues
        assert "office MFL appears in batches [0, 1]" in issues
        assert "office HGX (Houston/Galveston) is not in any batch" in issues

    def test_shared_minute_offset(self) -> None:
        registry = BatchRegistry(
            offices={"TBW": "Tampa Bay Area"},
            batch_offices=[["TBW"]] + [[] for _ in range(30)],
        )

        assert "batches [0, 30] share minute offset 0" in registry.audit()
