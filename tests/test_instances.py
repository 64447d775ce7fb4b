"""Tests for per-day task expansion and RRULE export."""

import pytest
from datetime import date, datetime

from focalplan.errors import ValidationError
from focalplan.models.task import TaskCompletionRecord
from focalplan.models.temporal import RecurrenceRule
from focalplan.recurrence.instances import instances_between, instances_for_date, instances_overlapping_day
from focalplan.recurrence.rrule_export import record_to_rrule, rule_to_rrule


class TestInstancesForDate:
    """Test instances_for_date()."""

    def test_one_off_task_is_its_own_instance(self, make_task):
        task = make_task()
        instances = instances_for_date([task], date(2024, 1, 1))

        assert len(instances) == 1
        assert instances[0].id == task.id
        assert instances[0].is_virtual is False

    def test_one_off_task_absent_on_other_days(self, make_task):
        assert instances_for_date([make_task()], date(2024, 1, 2)) == []

    def test_recurring_task_gets_virtual_instance(self, make_task):
        task = make_task(recurrence=RecurrenceRule.DAILY)
        instance = instances_for_date([task], date(2024, 1, 5))[0]

        assert instance.id == f"{task.id}:2024-01-05"
        assert instance.is_virtual is True
        assert instance.start_time == datetime(2024, 1, 5, 9, 0)
        assert instance.end_time == datetime(2024, 1, 5, 10, 0)

    def test_completion_record_marks_only_its_day(self, make_task, now):
        task = make_task(recurrence=RecurrenceRule.DAILY)
        record = TaskCompletionRecord(task_id=task.id, completed_date=date(2024, 1, 2), completed_at=now)

        done = instances_for_date([task], date(2024, 1, 2), [record])[0]
        open_ = instances_for_date([task], date(2024, 1, 3), [record])[0]

        assert done.is_completed is True
        assert done.completed_at == now
        assert open_.is_completed is False

    def test_sorted_by_start_time(self, make_task):
        late = make_task(title="Late", start_time=datetime(2024, 1, 1, 15, 0))
        early = make_task(title="Early", start_time=datetime(2024, 1, 1, 7, 0))
        titles = [i.title for i in instances_for_date([late, early], date(2024, 1, 1))]
        assert titles == ["Early", "Late"]

    def test_input_not_mutated(self, make_task):
        task = make_task(recurrence=RecurrenceRule.DAILY)
        before = task.model_dump()
        instances_for_date([task], date(2024, 1, 9))
        assert task.model_dump() == before


class TestInstancesBetween:

    def test_one_list_per_day(self, make_task):
        task = make_task(recurrence=RecurrenceRule.CUSTOM, repeat_days=[1, 3])  # Mon, Wed
        days = instances_between([task], date(2024, 1, 1), date(2024, 1, 7))

        assert len(days) == 7
        assert [len(d) for d in days] == [1, 0, 1, 0, 0, 0, 0]

    def test_reversed_range_rejected(self, make_task):
        with pytest.raises(ValidationError):
            instances_between([make_task()], date(2024, 1, 7), date(2024, 1, 1))


class TestInstancesOverlappingDay:
    """Occupancy includes occurrences that started the day before."""

    def test_recurring_spill_over(self, make_task):
        task = make_task(start_time=datetime(2024, 1, 1, 23, 0), duration_seconds=2 * 3600,
                         recurrence=RecurrenceRule.DAILY)
        instances = instances_overlapping_day([task], date(2024, 1, 3))
        assert [i.id for i in instances] == [f"{task.id}:2024-01-02", f"{task.id}:2024-01-03"]

    def test_ending_at_midnight_excluded(self, make_task):
        task = make_task(start_time=datetime(2024, 1, 1, 22, 0), duration_seconds=2 * 3600)
        assert instances_overlapping_day([task], date(2024, 1, 2)) == []

    def test_same_as_instances_for_date_without_spill_over(self, make_task):
        task = make_task(recurrence=RecurrenceRule.DAILY)
        day = date(2024, 1, 4)
        assert instances_overlapping_day([task], day) == instances_for_date([task], day)


class TestRruleExport:
    """Test rule_to_rrule() / record_to_rrule()."""

    def test_none_has_no_rrule(self):
        assert rule_to_rrule(RecurrenceRule.NONE) is None

    def test_fixed_frequencies(self):
        assert rule_to_rrule(RecurrenceRule.DAILY) == "FREQ=DAILY"
        assert rule_to_rrule(RecurrenceRule.WEEKLY) == "FREQ=WEEKLY"
        assert rule_to_rrule(RecurrenceRule.BIWEEKLY) == "FREQ=WEEKLY;INTERVAL=2"
        assert rule_to_rrule(RecurrenceRule.MONTHLY) == "FREQ=MONTHLY"
        assert rule_to_rrule(RecurrenceRule.YEARLY) == "FREQ=YEARLY"

    def test_custom_days(self, make_task):
        task = make_task(recurrence=RecurrenceRule.CUSTOM, repeat_days=[5, 1, 3])
        assert record_to_rrule(task) == "FREQ=WEEKLY;BYDAY=MO,WE,FR"

    def test_empty_custom_has_no_rrule(self):
        assert rule_to_rrule(RecurrenceRule.CUSTOM, []) is None

    def test_unknown_rule_rejected(self):
        with pytest.raises(ValidationError) as exc:
            rule_to_rrule("fortnightly")
        assert exc.value.field == "recurrence"
