"""Calendar service: owns the task store and its persistence lifecycle.

Collaborators (CLI, HTTP API) hold a CalendarService instead of touching
module-level state:

    service = CalendarService.from_settings(settings)
    service.initialize()      # load slot, hydrate store, attach persistence
    service.insert(...)       # every mutation is saved right away
    service.close()           # detach persistence, retry a failed save
"""
from datetime import date
from pathlib import Path
from typing import Any

from loguru import logger

from ..config import Settings
from .errors import PersistenceUnavailable
from .export import CsvExporter
from .models import Task
from .persistence import SlotPersistence
from .query import QueryView
from .store import Snapshot, TaskStore
from .types import DateKey

logger = logger.bind(module="tasks.service")


class CalendarService:
    """Task store + query view + exporter wired to a durable slot."""

    def __init__(
        self,
        persistence: SlotPersistence,
        exporter: CsvExporter | None = None,
        export_dir: str | Path = ".",
    ):
        self.persistence = persistence
        self.exporter = exporter or CsvExporter()
        self.export_dir = Path(export_dir)
        self.store = TaskStore()
        self.query = QueryView(self.store)

        # Non-blocking warnings for the UI (e.g. slot could not be read)
        self.warnings: list[str] = []
        # Last save failed; the next mutation retries
        self.persistence_degraded = False
        self._initialized = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "CalendarService":
        return cls(
            persistence=SlotPersistence(
                settings.data_dir,
                slot_name=settings.slot_name,
                slot_format=settings.slot_format,
            ),
            exporter=CsvExporter(date_format=settings.export_date_format),
            export_dir=settings.export_dir,
        )

    # ============== Lifecycle ==============

    def initialize(self) -> None:
        """Load the slot into the store and start saving on every mutation."""
        if self._initialized:
            return
        self.load()
        self.store.subscribe(self._persist)
        self._initialized = True
        logger.info(
            f"Calendar initialized: {self.store.count()} tasks from {self.persistence.path}"
        )

    def close(self) -> None:
        """Stop persisting; retry the save if the last one failed."""
        if not self._initialized:
            return
        self.store.unsubscribe(self._persist)
        if self.persistence_degraded:
            self._persist(self.store.all())
        self._initialized = False

    def __enter__(self) -> "CalendarService":
        self.initialize()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ============== Persistence ==============

    def load(self) -> Snapshot:
        """Replace the store's content with the slot's."""
        snapshot = self.persistence.load()
        self.store.replace(snapshot)
        if self.persistence.last_error is not None:
            self.warnings.append(self.persistence.last_error.message)
        return snapshot

    def save(self) -> None:
        """Write the current snapshot to the slot.

        Raises:
            PersistenceUnavailable: if the slot could not be written
        """
        self.persistence.save(self.store.all())
        self.persistence_degraded = False

    def _persist(self, snapshot: Snapshot) -> None:
        try:
            self.persistence.save(snapshot)
        except PersistenceUnavailable as e:
            if not self.persistence_degraded:
                logger.warning(f"{e.message}; changes are kept in memory only")
            self.persistence_degraded = True
            return
        if self.persistence_degraded:
            logger.info("Persistence recovered")
        self.persistence_degraded = False

    # ============== Tasks ==============

    def insert(
        self,
        date_key: Any,
        title: str,
        description: str = "",
        starttime: str = "09:00",
        endtime: str = "10:00",
    ) -> Task:
        return self.store.insert(date_key, title, description, starttime, endtime)

    def delete(self, date_key: Any, task_id: str) -> bool:
        return self.store.delete(date_key, task_id)

    def get(self, date_key: Any) -> list[Task]:
        return self.store.get(date_key)

    def all(self) -> Snapshot:
        return self.store.all()

    def filter(self, date_key: Any, search_term: str = "") -> list[Task]:
        return self.query.filter(date_key, search_term)

    def month(self, year: int, month: int, search_term: str = "") -> dict[DateKey, list[Task]]:
        return self.query.month(year, month, search_term)

    # ============== Export ==============

    def export(self) -> str:
        """CSV document of every task.

        Raises:
            NothingToExport: if the calendar is empty
        """
        return self.exporter.export(self.store.all())

    def export_filename(self, today: date | None = None) -> str:
        return self.exporter.filename(today)

    def export_to_file(
        self,
        directory: str | Path | None = None,
        today: date | None = None,
    ) -> Path:
        return self.exporter.write(
            self.store.all(),
            directory if directory is not None else self.export_dir,
            today=today,
        )
