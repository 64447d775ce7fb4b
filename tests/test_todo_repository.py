"""Tests for TodoRepository (SQLite in-memory)."""

import pytest
from datetime import date, datetime, time

from focalplan.errors import NotFoundError, ValidationError
from focalplan.models.energy import Priority
from focalplan.models.record_factory import update_record
from focalplan.models.todo import TodoReminderOption


@pytest.fixture
def medium_group(todo_repository, make_todo):
    """Three open medium todos created in order a, b, c."""
    return [todo_repository.create(make_todo(title=title)) for title in ("a", "b", "c")]


def order_of(todo_repository, priority=Priority.MEDIUM):
    return [
        (t.title, t.order_index)
        for t in todo_repository.get_all()
        if t.priority == priority and not t.is_completed
    ]


class TestTodoCrud:

    def test_create_appends_to_group(self, todo_repository, medium_group, make_todo):
        assert order_of(todo_repository) == [("a", 0), ("b", 1), ("c", 2)]

        high = todo_repository.create(make_todo(title="h", priority=Priority.HIGH))
        assert high.order_index == 0

    def test_round_trip_fields(self, todo_repository, make_todo):
        todo = make_todo(
            title="Taxes", due_date=date(2024, 1, 5), due_time=time(17, 30),
            estimated_duration_seconds=900, category="admin", notes="form 1040",
        )
        fetched = todo_repository.get(todo_repository.create(todo).id)

        assert fetched.due_date == date(2024, 1, 5)
        assert fetched.due_time == time(17, 30)
        assert fetched.estimated_duration_seconds == 900
        assert fetched.category == "admin"
        assert fetched.priority == Priority.MEDIUM

    def test_get_missing(self, todo_repository):
        with pytest.raises(NotFoundError):
            todo_repository.get("missing")

    def test_get_all_excludes_archived(self, todo_repository, medium_group, now):
        todo_repository.archive(medium_group[0].id, now)

        assert [t.title for t in todo_repository.get_all()] == ["b", "c"]
        assert len(todo_repository.get_all(include_archived=True)) == 3

    def test_toggle_completion(self, todo_repository, medium_group, now):
        done = todo_repository.toggle_completion(medium_group[0].id, now)
        assert done.is_completed is True
        assert done.completed_at == now

        reopened = todo_repository.toggle_completion(medium_group[0].id, now)
        assert reopened.is_completed is False
        assert reopened.completed_at is None


class TestOrdering:
    """order_index stays gap-free within each open priority group."""

    def test_priority_change_moves_to_end_of_new_group(self, todo_repository, medium_group, make_todo, now):
        todo_repository.create(make_todo(title="h", priority=Priority.HIGH))
        b = medium_group[1]

        moved = todo_repository.update(update_record(b, now, priority=Priority.HIGH), now)

        assert moved.order_index == 1
        assert order_of(todo_repository) == [("a", 0), ("c", 1)]
        assert order_of(todo_repository, Priority.HIGH) == [("h", 0), ("b", 1)]

    def test_completing_reindexes_open_group(self, todo_repository, medium_group, make_todo, now):
        todo_repository.toggle_completion(medium_group[0].id, now)
        assert order_of(todo_repository) == [("b", 0), ("c", 1)]

        d = todo_repository.create(make_todo(title="d"))
        assert d.order_index == 2
        assert order_of(todo_repository) == [("b", 0), ("c", 1), ("d", 2)]

    def test_reopened_todo_goes_to_end(self, todo_repository, medium_group, now):
        a = medium_group[0]
        todo_repository.toggle_completion(a.id, now)
        reopened = todo_repository.toggle_completion(a.id, now)

        assert reopened.order_index == 2
        assert order_of(todo_repository) == [("b", 0), ("c", 1), ("a", 2)]

    def test_archiving_open_todo_reindexes(self, todo_repository, medium_group, make_todo, now):
        todo_repository.archive(medium_group[1].id, now)
        assert order_of(todo_repository) == [("a", 0), ("c", 1)]
        assert todo_repository.create(make_todo(title="d")).order_index == 2

    def test_move(self, todo_repository, medium_group, now):
        c = medium_group[2]
        moved = todo_repository.move(c.id, 0, now)

        assert moved.order_index == 0
        assert order_of(todo_repository) == [("c", 0), ("a", 1), ("b", 2)]

    def test_move_out_of_range(self, todo_repository, medium_group, now):
        with pytest.raises(ValidationError) as exc:
            todo_repository.move(medium_group[0].id, 3, now)
        assert exc.value.field == "order_index"

    def test_delete_reindexes(self, todo_repository, medium_group):
        todo_repository.delete(medium_group[0].id)

        assert order_of(todo_repository) == [("b", 0), ("c", 1)]
        with pytest.raises(NotFoundError):
            todo_repository.get(medium_group[0].id)


class TestArchive:

    def test_archive_is_one_way(self, todo_repository, medium_group, now):
        archived = todo_repository.archive(medium_group[0].id, now)
        assert archived.is_archived is True

        again = todo_repository.archive(medium_group[0].id, now)
        assert again.is_archived is True
        assert again.updated_at == archived.updated_at

    def test_archive_all_completed(self, todo_repository, medium_group, now):
        todo_repository.toggle_completion(medium_group[0].id, now)
        todo_repository.toggle_completion(medium_group[1].id, now)

        assert todo_repository.archive_all_completed(now) == 2
        assert [t.title for t in todo_repository.get_all()] == ["c"]
        # Nothing left to archive
        assert todo_repository.archive_all_completed(now) == 0

    def test_delete_all_archived(self, todo_repository, medium_group, now):
        todo_repository.archive(medium_group[0].id, now)
        todo_repository.archive(medium_group[1].id, now)

        assert todo_repository.delete_all_archived() == 2
        assert [t.title for t in todo_repository.get_all(include_archived=True)] == ["c"]


class TestTodoReminders:

    def test_dated_todo_schedules_reminder(self, todo_repository, reminder_scheduler, make_todo, now):
        todo = todo_repository.create(
            make_todo(due_date=date(2024, 1, 2), reminder=TodoReminderOption.ONE_HOUR), now
        )
        assert reminder_scheduler.pending[todo.id] == (datetime(2024, 1, 2, 8, 0), todo.title)

    def test_archive_cancels_reminder(self, todo_repository, reminder_scheduler, make_todo, now):
        todo = todo_repository.create(
            make_todo(due_date=date(2024, 1, 2), reminder=TodoReminderOption.AT_TIME), now
        )
        todo_repository.archive(todo.id, now)
        assert todo.id not in reminder_scheduler.pending

    def test_undated_todo_has_no_reminder(self, todo_repository, reminder_scheduler, make_todo, now):
        todo = todo_repository.create(make_todo(reminder=TodoReminderOption.AT_TIME), now)
        assert todo.id not in reminder_scheduler.pending
