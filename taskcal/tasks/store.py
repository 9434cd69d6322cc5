"""In-memory task store partitioned by calendar date.

The store owns every Task. Mutations go through ``insert`` and ``delete``;
after each one the registered observers receive a snapshot of the whole
mapping, which is how persistence is attached (see service.py).

Thread-safety: none. A single actor mutates the store; if that ever
changes, the overlap check and the append in ``insert`` must become one
atomic step per date.
"""
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from uuid import uuid4

from loguru import logger

from .errors import EmptyTitle, OverlapConflict
from .models import Task
from .types import DateKey, TimeInterval

logger = logger.bind(module="tasks.store")

Snapshot = dict[DateKey, list[Task]]
Observer = Callable[[Snapshot], Any]


class TaskStore:
    """Mapping DateKey -> ordered list of non-overlapping tasks."""

    def __init__(self, snapshot: Mapping[Any, Iterable[Task]] | None = None):
        self._tasks: Snapshot = {}
        self._observers: list[Observer] = []
        if snapshot:
            self.replace(snapshot)

    # ============== Observers ==============

    def subscribe(self, observer: Observer) -> None:
        """Register a post-mutation hook."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self) -> None:
        snapshot = self.all()
        for observer in list(self._observers):
            observer(snapshot)

    # ============== Mutations ==============

    def insert(
        self,
        date_key: Any,
        title: str,
        description: str,
        starttime: str,
        endtime: str,
    ) -> Task:
        """Add a task to a date, rejecting it if it overlaps an existing one.

        Raises:
            InvalidDateKey, EmptyTitle, InvalidTimeFormat, InvalidTimeRange,
            OverlapConflict. Nothing is stored when any of these is raised.
        """
        key = DateKey.of(date_key)
        title = (title or "").strip()
        if not title:
            raise EmptyTitle("Task title is required")

        interval = TimeInterval.parse(starttime, endtime)
        for existing in self._tasks.get(key, []):
            if interval.overlaps(existing.interval):
                raise OverlapConflict(key, existing)

        start, end = interval.to_strings()
        task = Task(
            id=str(uuid4()),
            title=title,
            description=description or "",
            starttime=start,
            endtime=end,
        )
        self._tasks.setdefault(key, []).append(task)
        logger.debug(f"Inserted task {task.id} on {key} {start}-{end}")

        self._notify()
        return task

    def delete(self, date_key: Any, task_id: str) -> bool:
        """Remove a task. Unknown dates or ids are a no-op.

        Returns:
            Whether a task was removed
        """
        key = DateKey.of(date_key)
        tasks = self._tasks.get(key)
        removed = False
        if tasks:
            remaining = [t for t in tasks if t.id != task_id]
            removed = len(remaining) != len(tasks)
            if remaining:
                self._tasks[key] = remaining
            else:
                del self._tasks[key]

        if removed:
            logger.debug(f"Deleted task {task_id} on {key}")
        self._notify()
        return removed

    def replace(self, snapshot: Mapping[Any, Iterable[Task]]) -> None:
        """Hydrate the store from a snapshot without notifying observers.

        Keys naming the same date are merged in snapshot order.
        """
        tasks: Snapshot = {}
        for date_key, day_tasks in snapshot.items():
            tasks.setdefault(DateKey.of(date_key), []).extend(day_tasks)
        self._tasks = {key: day_tasks for key, day_tasks in tasks.items() if day_tasks}

    # ============== Queries ==============

    def get(self, date_key: Any) -> list[Task]:
        """Tasks on a date in insertion order; empty if none."""
        return list(self._tasks.get(DateKey.of(date_key), []))

    def all(self) -> Snapshot:
        """Snapshot of the whole mapping."""
        return {key: list(tasks) for key, tasks in self._tasks.items()}

    def dates(self) -> list[DateKey]:
        return list(self._tasks.keys())

    def count(self) -> int:
        return sum(len(tasks) for tasks in self._tasks.values())

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, date_key: Any) -> bool:
        return DateKey.of(date_key) in self._tasks
