"""CSV export of the task store."""
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path

from loguru import logger

from .errors import NothingToExport
from .models import Task
from .types import DateKey

logger = logger.bind(module="tasks.export")

CSV_HEADER = ["Date", "Title", "Description", "Start Time", "End Time"]
DEFAULT_DATE_FORMAT = "%m-%d-%Y"


def quote(text: str) -> str:
    """Wrap a field in double quotes, doubling any quote inside it."""
    return '"' + text.replace('"', '""') + '"'


class CsvExporter:
    """Flatten a snapshot into a CSV document.

    Title and description are always quoted; date and times never are.
    """

    def __init__(self, date_format: str = DEFAULT_DATE_FORMAT):
        self.date_format = date_format

    def export(self, snapshot: Mapping[DateKey, Sequence[Task]]) -> str:
        """Render every task, date by date in mapping order.

        Raises:
            NothingToExport: if the snapshot holds no task
        """
        rows = [CSV_HEADER]
        for key, tasks in snapshot.items():
            for task in tasks:
                rows.append([
                    str(key),
                    quote(task.title),
                    quote(task.description),
                    task.starttime,
                    task.endtime,
                ])

        if len(rows) == 1:
            raise NothingToExport()
        return "\n".join(",".join(row) for row in rows)

    def filename(self, today: date | None = None) -> str:
        """Download name, e.g. ``calendar-tasks-03-01-2024.csv``."""
        today = today or date.today()
        stamp = today.strftime(self.date_format).replace("/", "-")
        return f"calendar-tasks-{stamp}.csv"

    def write(
        self,
        snapshot: Mapping[DateKey, Sequence[Task]],
        directory: str | Path,
        today: date | None = None,
    ) -> Path:
        """Export to a file in ``directory`` and return its path."""
        content = self.export(snapshot)
        directory = Path(directory).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename(today)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        total = sum(len(tasks) for tasks in snapshot.values())
        logger.info(f"Exported {total} tasks to {path}")
        return path
