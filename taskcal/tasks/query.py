"""Read-only views over the task store."""
import calendar
from datetime import date

from .errors import InvalidDateKey
from .models import Task
from .store import TaskStore
from .types import DateKey


def days_in_month(year: int, month: int) -> list[DateKey]:
    """Every date of a month, first to last."""
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise InvalidDateKey(f"Invalid month: {year}-{month}")
    _, last_day = calendar.monthrange(year, month)
    return [DateKey(date(year, month, day)) for day in range(1, last_day + 1)]


class QueryView:
    """Filtered views over a TaskStore.

    Nothing is cached: every call reads the store's current state.
    """

    def __init__(self, store: TaskStore):
        self.store = store

    def filter(self, date_key, search_term: str = "") -> list[Task]:
        """Tasks on a date whose title or description contains the term.

        The match is a case-insensitive substring test; an empty term
        matches every task. Insertion order is kept.
        """
        tasks = self.store.get(date_key)
        if not search_term:
            return tasks
        return [t for t in tasks if t.matches(search_term)]

    def month(
        self,
        year: int,
        month: int,
        search_term: str = "",
    ) -> dict[DateKey, list[Task]]:
        """Matching tasks for each date of a month that has any."""
        result: dict[DateKey, list[Task]] = {}
        for key in days_in_month(year, month):
            tasks = self.filter(key, search_term)
            if tasks:
                result[key] = tasks
        return result
