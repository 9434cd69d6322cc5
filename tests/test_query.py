"""Tests for filtered views."""
import pytest

from taskcal.tasks.errors import InvalidDateKey
from taskcal.tasks.query import QueryView, days_in_month
from taskcal.tasks.types import DateKey

DAY = "2024-03-01"


@pytest.fixture
def view(store):
    store.insert(DAY, "Standup", "Daily sync with the team", "09:00", "09:30")
    store.insert(DAY, "Review", "Code REVIEW for billing", "09:30", "10:00")
    store.insert(DAY, "Lunch", "", "12:00", "13:00")
    store.insert("2024-03-15", "Dentist", "bring card", "15:00", "16:00")
    store.insert("2024-04-01", "Standup", "", "09:00", "09:30")
    return QueryView(store)


class TestFilter:
    """Tests for per-date search."""

    def test_empty_term_returns_everything_in_order(self, view, store):
        assert view.filter(DAY, "") == store.get(DAY)
        assert view.filter(DAY) == store.get(DAY)

    def test_title_match_is_case_insensitive(self, view):
        assert [t.title for t in view.filter(DAY, "STAND")] == ["Standup"]

    def test_description_match(self, view):
        assert [t.title for t in view.filter(DAY, "billing")] == ["Review"]

    def test_substring_not_tokenized(self, view):
        assert [t.title for t in view.filter(DAY, "view fo")] == ["Review"]

    def test_match_keeps_insertion_order(self, view):
        assert [t.title for t in view.filter(DAY, "e")] == ["Standup", "Review"]

    def test_no_match(self, view):
        assert view.filter(DAY, "holiday") == []

    def test_unknown_date(self, view):
        assert view.filter("2030-01-01", "") == []

    def test_sees_later_mutations(self, view, store):
        task = store.insert(DAY, "Standup retro", "", "16:00", "16:30")
        assert task in view.filter(DAY, "standup")
        store.delete(DAY, task.id)
        assert task not in view.filter(DAY, "standup")


class TestMonth:
    """Tests for month view."""

    def test_dates_with_tasks_in_calendar_order(self, view):
        month = view.month(2024, 3)
        assert list(month) == [DateKey.of(DAY), DateKey.of("2024-03-15")]
        assert len(month[DateKey.of(DAY)]) == 3

    def test_search_drops_dates_without_matches(self, view):
        month = view.month(2024, 3, "standup")
        assert list(month) == [DateKey.of(DAY)]

    def test_other_month(self, view):
        assert list(view.month(2024, 4)) == [DateKey.of("2024-04-01")]

    def test_days_in_month(self):
        assert len(days_in_month(2024, 2)) == 29
        assert len(days_in_month(2023, 2)) == 28
        assert days_in_month(2024, 3)[0] == DateKey.of("2024-03-01")
        assert days_in_month(2024, 3)[-1] == DateKey.of("2024-03-31")

    def test_invalid_month(self):
        with pytest.raises(InvalidDateKey):
            days_in_month(2024, 13)
