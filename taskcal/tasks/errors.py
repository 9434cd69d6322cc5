"""Error taxonomy for the task store.

- TaskInputError: rejected input, raised before any state change
- NothingToExport: user-facing warning, export is a no-op
- PersistenceUnavailable: storage read/write failure, recoverable
"""
from typing import Any


class TaskCalError(Exception):
    """Base class for all task calendar errors."""
    code = "TASKCAL_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class TaskInputError(TaskCalError):
    """Invalid input from a collaborator."""
    code = "INVALID_INPUT"


class InvalidDateKey(TaskInputError):
    code = "INVALID_DATE"


class EmptyTitle(TaskInputError):
    code = "EMPTY_TITLE"


class InvalidTimeFormat(TaskInputError):
    code = "INVALID_TIME_FORMAT"


class InvalidTimeRange(TaskInputError):
    code = "INVALID_TIME_RANGE"


class OverlapConflict(TaskInputError):
    """The new interval overlaps a task already stored on the same date."""
    code = "OVERLAP_CONFLICT"

    def __init__(self, date_key: Any, conflict: Any):
        super().__init__(
            f"{conflict.starttime}-{conflict.endtime} '{conflict.title}' "
            f"already occupies this time slot on {date_key}"
        )
        self.date_key = date_key
        self.conflict = conflict


class NothingToExport(TaskCalError):
    code = "NOTHING_TO_EXPORT"

    def __init__(self, message: str = "No tasks to export"):
        super().__init__(message)


class PersistenceUnavailable(TaskCalError):
    code = "PERSISTENCE_UNAVAILABLE"
