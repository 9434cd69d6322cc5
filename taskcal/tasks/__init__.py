"""Task calendar core.

This package contains the task calendar components:
- types.py: DateKey, TimeInterval and wall-clock helpers
- models.py: Task model
- store.py: Date-partitioned store with overlap validation
- query.py: Filtered views (by date, by month, by search term)
- persistence.py: Durable JSON/YAML slot
- export.py: CSV export
- service.py: Owned lifecycle object wiring the above
"""
from .errors import (
    EmptyTitle,
    InvalidDateKey,
    InvalidTimeFormat,
    InvalidTimeRange,
    NothingToExport,
    OverlapConflict,
    PersistenceUnavailable,
    TaskCalError,
    TaskInputError,
)
from .export import CsvExporter
from .models import Task
from .persistence import SlotPersistence
from .query import QueryView
from .service import CalendarService
from .store import TaskStore
from .types import DateKey, TimeInterval, format_minutes, overlaps, to_minutes

__all__ = [
    "CalendarService",
    "CsvExporter",
    "DateKey",
    "EmptyTitle",
    "InvalidDateKey",
    "InvalidTimeFormat",
    "InvalidTimeRange",
    "NothingToExport",
    "OverlapConflict",
    "PersistenceUnavailable",
    "QueryView",
    "SlotPersistence",
    "Task",
    "TaskCalError",
    "TaskInputError",
    "TaskStore",
    "TimeInterval",
    "format_minutes",
    "overlaps",
    "to_minutes",
]
