"""Tests for record creation and mutation helpers."""

import pytest
from datetime import date, datetime, time

from focalplan.errors import NotFoundError, ValidationError
from focalplan.models.record_factory import (
    add_subtask,
    archive_todo,
    create_task_record,
    create_todo_record,
    move_subtask,
    move_task_to_day,
    remove_subtask,
    toggle_completion,
    toggle_subtask,
    update_record,
)
from focalplan.models.energy import Priority
from focalplan.models.temporal import RecurrenceRule


class TestCreateTaskRecord:
    """Test create_task_record()."""

    def test_defaults(self, now):
        task = create_task_record("Gym", datetime(2024, 1, 1, 7, 0), now=now)

        assert task.title == "Gym"
        assert task.duration_seconds == 3600
        assert task.energy_level == 2
        assert task.recurrence == RecurrenceRule.NONE
        assert task.created_at == now
        assert task.updated_at == now
        assert len(task.id) == 36

    def test_overrides(self, now):
        task = create_task_record(
            "Run", datetime(2024, 1, 1, 7, 0), now=now,
            duration_seconds=1800, recurrence=RecurrenceRule.CUSTOM, repeat_days=[5, 1, 1],
        )
        assert task.duration_seconds == 1800
        assert task.repeat_days == [1, 5]

    def test_blank_title_rejected(self, now):
        with pytest.raises(ValidationError) as exc:
            create_task_record("   ", datetime(2024, 1, 1, 7, 0), now=now)
        assert exc.value.field == "title"

    def test_negative_duration_rejected(self, now):
        with pytest.raises(ValidationError) as exc:
            create_task_record("Gym", datetime(2024, 1, 1, 7, 0), now=now, duration_seconds=-1)
        assert exc.value.field == "duration_seconds"

    def test_weekday_out_of_range_rejected(self, now):
        with pytest.raises(ValidationError) as exc:
            create_task_record("Gym", datetime(2024, 1, 1), now=now, repeat_days=[7])
        assert exc.value.field == "repeat_days"

    def test_energy_out_of_range_rejected(self, now):
        with pytest.raises(ValidationError) as exc:
            create_task_record("Gym", datetime(2024, 1, 1), now=now, energy_level=5)
        assert exc.value.field == "energy_level"


class TestCreateTodoRecord:

    def test_defaults(self, now):
        todo = create_todo_record("Taxes", now=now)
        assert todo.priority == Priority.MEDIUM
        assert todo.is_archived is False
        assert todo.estimated_duration_seconds is None

    def test_due_time_without_date_dropped(self, now):
        todo = create_todo_record("Taxes", now=now, due_time=time(17, 0))
        assert todo.due_time is None

    def test_due_time_with_date_kept(self, now):
        todo = create_todo_record("Taxes", now=now, due_date=date(2024, 1, 3), due_time=time(17, 0))
        assert todo.has_due_time is True


class TestMutations:
    """Mutations return new records and never touch their input."""

    def test_update_record(self, make_task, now):
        task = make_task()
        updated = update_record(task, now, title="Renamed", duration_seconds=600)

        assert updated.title == "Renamed"
        assert updated.updated_at == now
        assert task.title == "Test Task"

    def test_update_rejects_immutable_fields(self, make_task, now):
        with pytest.raises(ValidationError) as exc:
            update_record(make_task(), now, id="other")
        assert exc.value.field == "id"

    def test_update_rejects_unknown_fields(self, make_task, now):
        with pytest.raises(ValidationError):
            update_record(make_task(), now, colour="red")

    def test_update_revalidates(self, make_task, now):
        with pytest.raises(ValidationError):
            update_record(make_task(), now, duration_seconds=-5)

    def test_toggle_completion(self, make_todo, now):
        todo = make_todo()
        done = toggle_completion(todo, now)
        assert done.is_completed and done.completed_at == now

        reopened = toggle_completion(done, now)
        assert not reopened.is_completed and reopened.completed_at is None

    def test_archive_is_one_way(self, make_todo, now):
        archived = archive_todo(make_todo(), now)
        assert archived.is_archived
        assert archive_todo(archived, now) is archived

    def test_move_task_keeps_time_of_day(self, make_task, now):
        moved = move_task_to_day(make_task(), date(2024, 1, 5), now)
        assert moved.start_time == datetime(2024, 1, 5, 9, 0)

    def test_move_task_with_new_time(self, make_task, now):
        moved = move_task_to_day(make_task(), date(2024, 1, 5), now, hour=14, minute=30)
        assert moved.start_time == datetime(2024, 1, 5, 14, 30)

    def test_move_task_rejects_bad_hour(self, make_task, now):
        with pytest.raises(ValidationError):
            move_task_to_day(make_task(), date(2024, 1, 5), now, hour=24)


class TestSubtasks:
    """Subtasks keep an explicit, gap-free order_index."""

    @pytest.fixture
    def todo_with_subtasks(self, make_todo, now):
        todo = make_todo()
        for title in ("one", "two", "three"):
            todo = add_subtask(todo, title, now)
        return todo

    def test_sequential_indexes(self, todo_with_subtasks):
        assert [(s.title, s.order_index) for s in todo_with_subtasks.subtasks] == [
            ("one", 0), ("two", 1), ("three", 2),
        ]

    def test_remove_reindexes(self, todo_with_subtasks, now):
        two = todo_with_subtasks.subtasks[1]
        after = remove_subtask(todo_with_subtasks, two.id, now)
        assert [(s.title, s.order_index) for s in after.subtasks] == [("one", 0), ("three", 1)]

    def test_remove_unknown(self, todo_with_subtasks, now):
        with pytest.raises(NotFoundError):
            remove_subtask(todo_with_subtasks, "missing", now)

    def test_toggle(self, todo_with_subtasks, now):
        first = todo_with_subtasks.subtasks[0]
        after = toggle_subtask(todo_with_subtasks, first.id, now)
        assert after.completed_subtasks_count == 1
        assert after.subtasks_progress == pytest.approx(1 / 3)

    def test_move(self, todo_with_subtasks, now):
        three = todo_with_subtasks.subtasks[2]
        after = move_subtask(todo_with_subtasks, three.id, 0, now)
        assert [s.title for s in after.subtasks] == ["three", "one", "two"]
        assert [s.order_index for s in after.subtasks] == [0, 1, 2]

    def test_move_out_of_range(self, todo_with_subtasks, now):
        with pytest.raises(ValidationError) as exc:
            move_subtask(todo_with_subtasks, todo_with_subtasks.subtasks[0].id, 5, now)
        assert exc.value.field == "order_index"

    def test_blank_subtask_title(self, make_task, now):
        with pytest.raises(ValidationError):
            add_subtask(make_task(), "", now)
