"""Tests for priority ranking, effort tiers and energy load."""

import pytest
from datetime import date, datetime

from focalplan.engine.classifier import (
    daily_energy_load,
    effort_tier,
    energy_gauge,
    energy_label,
    priority_rank,
    tier_allowed,
)
from focalplan.errors import ValidationError
from focalplan.models.energy import EffortTier, EnergyRequest, Priority
from focalplan.models.task import TaskCompletionRecord
from focalplan.models.temporal import RecurrenceRule


class TestPriorityRank:

    def test_fixed_order(self):
        ranks = [priority_rank(p) for p in (Priority.HIGH, Priority.MEDIUM, Priority.LOW, Priority.NONE)]
        assert ranks == [0, 1, 2, 3]

    def test_accepts_string_values(self):
        assert priority_rank("low") == 2

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError) as exc:
            priority_rank("urgent")
        assert exc.value.field == "priority"


class TestEffortTier:
    """Test effort_tier() classification rules."""

    def test_short_estimate_is_low(self, make_todo):
        todo = make_todo(priority=Priority.HIGH, energy_level=4, estimated_duration_seconds=15 * 60)
        assert effort_tier(todo) == EffortTier.LOW

    def test_light_energy_is_low(self, make_todo):
        assert effort_tier(make_todo(priority=Priority.HIGH, energy_level=1)) == EffortTier.LOW

    def test_low_priority_is_low(self, make_todo):
        assert effort_tier(make_todo(priority=Priority.LOW, energy_level=4)) == EffortTier.LOW
        assert effort_tier(make_todo(priority=Priority.NONE, energy_level=4)) == EffortTier.LOW

    def test_moderate_energy_is_medium(self, make_todo):
        assert effort_tier(make_todo(priority=Priority.HIGH, energy_level=2)) == EffortTier.MEDIUM

    def test_medium_priority_is_medium(self, make_todo):
        assert effort_tier(make_todo(priority=Priority.MEDIUM, energy_level=4)) == EffortTier.MEDIUM

    def test_high_priority_high_energy_is_high(self, make_todo):
        assert effort_tier(make_todo(priority=Priority.HIGH, energy_level=3)) == EffortTier.HIGH

    def test_missing_estimate_is_not_short(self, make_todo):
        todo = make_todo(priority=Priority.HIGH, energy_level=3, estimated_duration_seconds=None)
        assert effort_tier(todo) == EffortTier.HIGH

    def test_long_estimate_is_not_short(self, make_todo):
        todo = make_todo(priority=Priority.HIGH, energy_level=3, estimated_duration_seconds=16 * 60)
        assert effort_tier(todo) == EffortTier.HIGH


class TestTierAllowed:

    @pytest.mark.parametrize("energy,allowed", [
        (EnergyRequest.LOW, {EffortTier.LOW}),
        (EnergyRequest.MEDIUM, {EffortTier.LOW, EffortTier.MEDIUM}),
        (EnergyRequest.HIGH, {EffortTier.LOW, EffortTier.MEDIUM, EffortTier.HIGH}),
    ])
    def test_compatibility(self, energy, allowed):
        assert {t for t in EffortTier if tier_allowed(t, energy)} == allowed

    def test_unknown_energy_rejected(self):
        with pytest.raises(ValidationError) as exc:
            tier_allowed(EffortTier.LOW, "extreme")
        assert exc.value.field == "energy"

    def test_unknown_tier_rejected(self):
        with pytest.raises(ValidationError) as exc:
            tier_allowed("heroic", EnergyRequest.HIGH)
        assert exc.value.field == "tier"


class TestEnergyLoad:
    """Test daily_energy_load() and the gauge."""

    def test_sums_energy_of_day(self, make_task):
        tasks = [
            make_task(energy_level=3),
            make_task(energy_level=1, start_time=datetime(2024, 1, 1, 14, 0)),
            make_task(energy_level=4, start_time=datetime(2024, 1, 2, 9, 0)),
        ]
        assert daily_energy_load(tasks, date(2024, 1, 1)) == 4

    def test_includes_recurring_expansions(self, make_task):
        daily = make_task(energy_level=2, recurrence=RecurrenceRule.DAILY)
        assert daily_energy_load([daily], date(2024, 1, 10)) == 2

    def test_completed_occurrences_still_count(self, make_task, now):
        daily = make_task(energy_level=2, recurrence=RecurrenceRule.DAILY)
        record = TaskCompletionRecord(task_id=daily.id, completed_date=date(2024, 1, 3), completed_at=now)
        assert daily_energy_load([daily], date(2024, 1, 3), [record]) == 2

    def test_empty_day(self):
        assert daily_energy_load([], date(2024, 1, 1)) == 0

    def test_gauge(self):
        assert energy_gauge(0, 20) == 0
        assert energy_gauge(5, 20) == 25
        assert energy_gauge(40, 20) == 100

    def test_gauge_rejects_bad_capacity(self):
        with pytest.raises(ValidationError) as exc:
            energy_gauge(5, 0)
        assert exc.value.field == "capacity"

    def test_energy_label(self):
        assert energy_label(0) == "Restful"
        assert energy_label(4) == "Intense"
        with pytest.raises(ValidationError):
            energy_label(5)
