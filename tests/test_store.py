"""Tests for the date-partitioned task store."""
import itertools
from datetime import date, datetime

import pytest

from taskcal.tasks.errors import (
    EmptyTitle,
    InvalidDateKey,
    InvalidTimeFormat,
    InvalidTimeRange,
    OverlapConflict,
)
from taskcal.tasks.store import TaskStore
from taskcal.tasks.types import DateKey, overlaps

DAY = "2024-03-01"


class TestInsert:
    """Tests for overlap-checked insertion."""

    def test_touching_tasks_then_conflict(self, store):
        """Standup and Review touch; Sync overlaps Standup."""
        standup = store.insert(DAY, "Standup", "", "09:00", "09:30")
        review = store.insert(DAY, "Review", "", "09:30", "10:00")

        with pytest.raises(OverlapConflict) as exc_info:
            store.insert(DAY, "Sync", "", "09:15", "09:45")

        assert exc_info.value.conflict == standup
        assert exc_info.value.date_key == DateKey.of(DAY)
        assert store.get(DAY) == [standup, review]

    def test_returns_created_task(self, store):
        task = store.insert(DAY, "  Plan  ", "quarterly", "9:00", "10:15")

        assert task.id
        assert task.title == "Plan"
        assert task.description == "quarterly"
        assert task.starttime == "09:00"
        assert task.endtime == "10:15"
        assert task.created_at.tzinfo is not None

    def test_unique_ids(self, store):
        a = store.insert(DAY, "A", "", "08:00", "09:00")
        b = store.insert("2024-03-02", "B", "", "08:00", "09:00")
        assert a.id != b.id

    @pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("10:00", "09:00"), ("23:59", "00:00")])
    def test_invalid_range(self, store, start, end):
        with pytest.raises(InvalidTimeRange):
            store.insert(DAY, "Bad", "", start, end)
        assert store.get(DAY) == []

    def test_invalid_range_on_any_date(self, store):
        for day in ["2024-01-01", "2024-02-29", "2025-12-31"]:
            with pytest.raises(InvalidTimeRange):
                store.insert(day, "Bad", "", "12:00", "11:00")
        assert store.all() == {}

    def test_invalid_time_format(self, store):
        with pytest.raises(InvalidTimeFormat):
            store.insert(DAY, "Bad", "", "9am", "10:00")

    def test_empty_title(self, store):
        with pytest.raises(EmptyTitle):
            store.insert(DAY, "   ", "", "09:00", "10:00")

    def test_invalid_date(self, store):
        with pytest.raises(InvalidDateKey):
            store.insert("not-a-date", "Title", "", "09:00", "10:00")

    def test_same_slot_on_other_date_is_allowed(self, store):
        store.insert(DAY, "A", "", "09:00", "10:00")
        store.insert("2024-03-02", "A", "", "09:00", "10:00")
        assert len(store) == 2

    def test_no_stored_pair_overlaps(self, store):
        """Whatever gets accepted, no two tasks on a date overlap."""
        slots = ["08:00", "08:30", "09:00", "09:45", "10:00", "11:15", "12:00"]
        for start, end in itertools.permutations(slots, 2):
            try:
                store.insert(DAY, f"{start}-{end}", "", start, end)
            except (OverlapConflict, InvalidTimeRange):
                pass

        tasks = store.get(DAY)
        assert tasks
        for t1, t2 in itertools.combinations(tasks, 2):
            assert not overlaps(t1.starttime, t1.endtime, t2.starttime, t2.endtime)

    def test_date_forms_share_a_partition(self, store):
        store.insert(date(2024, 3, 1), "A", "", "09:00", "10:00")
        with pytest.raises(OverlapConflict):
            store.insert(datetime(2024, 3, 1, 22, 0), "B", "", "09:30", "10:30")
        assert len(store.get(DAY)) == 1


class TestDelete:
    """Tests for deletion."""

    def test_delete_then_get(self, store):
        a = store.insert(DAY, "A", "", "09:00", "10:00")
        b = store.insert(DAY, "B", "", "10:00", "11:00")

        assert store.delete(DAY, a.id) is True
        assert [t.id for t in store.get(DAY)] == [b.id]

    def test_delete_unknown_id_is_noop(self, store):
        a = store.insert(DAY, "A", "", "09:00", "10:00")
        before = store.all()

        assert store.delete(DAY, "missing") is False
        assert store.delete("2030-01-01", a.id) is False
        assert store.all() == before

    def test_last_task_removes_date(self, store):
        a = store.insert(DAY, "A", "", "09:00", "10:00")
        store.delete(DAY, a.id)
        assert DAY not in store
        assert store.all() == {}

    def test_freed_slot_can_be_reused(self, store):
        a = store.insert(DAY, "A", "", "09:00", "10:00")
        store.delete(DAY, a.id)
        store.insert(DAY, "B", "", "09:15", "09:45")
        assert [t.title for t in store.get(DAY)] == ["B"]


class TestObservers:
    """Tests for post-mutation hooks."""

    def test_notified_after_insert_and_delete(self, store):
        seen = []
        store.subscribe(seen.append)

        task = store.insert(DAY, "A", "", "09:00", "10:00")
        store.delete(DAY, task.id)

        assert len(seen) == 2
        assert seen[0] == {DateKey.of(DAY): [task]}
        assert seen[1] == {}

    def test_not_notified_on_rejected_insert(self, store):
        store.insert(DAY, "A", "", "09:00", "10:00")
        seen = []
        store.subscribe(seen.append)

        with pytest.raises(OverlapConflict):
            store.insert(DAY, "B", "", "09:30", "10:30")
        assert seen == []

    def test_unsubscribe(self, store):
        seen = []
        store.subscribe(seen.append)
        store.unsubscribe(seen.append)
        store.insert(DAY, "A", "", "09:00", "10:00")
        assert seen == []

    def test_snapshot_is_a_copy(self, store):
        store.insert(DAY, "A", "", "09:00", "10:00")
        snapshot = store.all()
        snapshot[DateKey.of(DAY)].clear()
        store.get(DAY).clear()
        assert len(store.get(DAY)) == 1


class TestReplace:
    """Tests for hydration."""

    def test_replace_does_not_notify(self):
        source = TaskStore()
        task = source.insert(DAY, "A", "", "09:00", "10:00")

        seen = []
        target = TaskStore()
        target.subscribe(seen.append)
        target.replace({DAY: [task], "2024-03-02": []})

        assert seen == []
        assert target.get(DAY) == [task]
        assert target.dates() == [DateKey.of(DAY)]

    def test_keys_for_the_same_date_are_merged(self):
        """A date key and a datetime key on that date both keep their tasks."""
        source = TaskStore()
        c = source.insert("2024-03-02", "C", "", "09:00", "10:00")
        d = source.insert("2024-03-03", "D", "", "11:00", "12:00")

        target = TaskStore()
        target.replace({"2024-03-02": [c], "2024-03-02T08:00:00": [d]})

        assert target.get("2024-03-02") == [c, d]
        assert target.count() == 2

    def test_constructor_snapshot(self):
        task = TaskStore().insert(DAY, "A", "", "09:00", "10:00")
        assert TaskStore({DAY: [task]}).count() == 1
