"""Durable slot for the task store.

The whole DateKey -> tasks mapping lives in one named slot, a single file
under the data directory:

    <data_dir>/calendarTasks.json   (default)
    <data_dir>/calendarTasks.yaml   (slot_format="yaml")

Writes replace the file atomically. A slot that cannot be read never stops
the caller: ``load`` logs the problem, keeps the broken file aside under a
unique ``.corrupt-<timestamp>`` name and starts from an empty store.
"""
import itertools
import json
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from .errors import InvalidTimeFormat, PersistenceUnavailable, TaskCalError
from .models import Task
from .store import Snapshot
from .types import DateKey, format_minutes, overlaps, to_minutes

logger = logger.bind(module="tasks.persistence")

DEFAULT_SLOT_NAME = "calendarTasks"
SLOT_FORMATS = {"json": ".json", "yaml": ".yaml"}


class TaskRecord(BaseModel):
    """Persisted form of a Task."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    starttime: str
    endtime: str
    created_at: datetime = Field(alias="createdAt")

    @field_validator("starttime", "endtime")
    @classmethod
    def _check_time(cls, value: str) -> str:
        try:
            return format_minutes(to_minutes(value))
        except InvalidTimeFormat as e:
            raise ValueError(e.message) from e

    @model_validator(mode="after")
    def _check_range(self) -> "TaskRecord":
        if to_minutes(self.endtime) <= to_minutes(self.starttime):
            raise ValueError(f"endtime {self.endtime} is not after starttime {self.starttime}")
        return self

    def to_task(self) -> Task:
        return Task(
            id=self.id,
            title=self.title,
            description=self.description,
            starttime=self.starttime,
            endtime=self.endtime,
            created_at=self.created_at,
        )


_SLOT_ADAPTER = TypeAdapter(dict[str, list[TaskRecord]])


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, list[dict[str, Any]]]:
    """Convert a snapshot to its wire form, keyed by ``YYYY-MM-DD``."""
    return {
        str(key): [task.to_dict() for task in tasks]
        for key, tasks in snapshot.items()
    }


def snapshot_from_dict(data: Any) -> Snapshot:
    """Validate wire data and rebuild a snapshot.

    Keys naming the same date (``2024-03-02`` and ``2024-03-02T08:00:00``)
    are merged in slot order.

    Raises:
        ValueError / TaskCalError if the data does not describe a store
    """
    records = _SLOT_ADAPTER.validate_python({} if data is None else data)
    snapshot: Snapshot = {}
    for date_str, day_records in records.items():
        key = DateKey.parse(date_str)
        snapshot.setdefault(key, []).extend(record.to_task() for record in day_records)

    for key, tasks in snapshot.items():
        for a, b in itertools.combinations(tasks, 2):
            if overlaps(a.starttime, a.endtime, b.starttime, b.endtime):
                raise ValueError(
                    f"tasks {a.id} ({a.starttime}-{a.endtime}) and "
                    f"{b.id} ({b.starttime}-{b.endtime}) overlap on {key}"
                )
    return {key: tasks for key, tasks in snapshot.items() if tasks}


class SlotPersistence:
    """Load and save the whole task store in a single named slot."""

    def __init__(
        self,
        data_dir: str | Path,
        slot_name: str = DEFAULT_SLOT_NAME,
        slot_format: str = "json",
    ):
        """Initialize the slot.

        Args:
            data_dir: Directory holding the slot file
            slot_name: Name of the slot (file stem)
            slot_format: "json" or "yaml"
        """
        if slot_format not in SLOT_FORMATS:
            raise ValueError(f"Unknown slot format: {slot_format}")
        self.data_dir = Path(data_dir).expanduser()
        self.slot_name = slot_name
        self.slot_format = slot_format
        self.path = self.data_dir / f"{slot_name}{SLOT_FORMATS[slot_format]}"
        self.last_error: PersistenceUnavailable | None = None
        # Set when the slot on disk must not be written over
        self.save_blocked = False

    # ============== Encoding ==============

    def _encode(self, data: dict[str, Any]) -> str:
        if self.slot_format == "yaml":
            return yaml.safe_dump(
                data,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )
        return json.dumps(data, ensure_ascii=False, indent=2)

    def _decode(self, text: str) -> Any:
        if self.slot_format == "yaml":
            return yaml.safe_load(text)
        return json.loads(text)

    # ============== Load / Save ==============

    def load(self) -> Snapshot:
        """Read the slot. Never raises; a broken slot yields an empty store."""
        self.last_error = None
        self.save_blocked = False
        if not self.path.exists():
            logger.info(f"No saved tasks at {self.path}, starting empty")
            return {}

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            # The file may be fine; leave it in place and never write over it
            self.last_error = PersistenceUnavailable(
                f"Could not read saved tasks from {self.path}: {e}"
            )
            self.save_blocked = True
            logger.warning(f"{self.last_error.message}; changes will not be saved")
            return {}

        try:
            snapshot = snapshot_from_dict(self._decode(raw.decode("utf-8")))
        except (ValueError, yaml.YAMLError, TaskCalError) as e:
            self.last_error = PersistenceUnavailable(
                f"Could not read saved tasks from {self.path}: {e}"
            )
            logger.warning(f"{self.last_error.message}; starting with an empty calendar")
            self._quarantine()
            return {}

        total = sum(len(tasks) for tasks in snapshot.values())
        logger.info(f"Loaded {total} tasks on {len(snapshot)} dates from {self.path}")
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        """Write the whole snapshot to the slot (atomic).

        Raises:
            PersistenceUnavailable: if the slot could not be written, or
                holds data that load could neither read nor move aside
        """
        if self.save_blocked:
            raise PersistenceUnavailable(
                f"Refusing to overwrite unreadable saved tasks at {self.path}"
            )
        content = self._encode(snapshot_to_dict(snapshot))
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.replace(self.path)
        except OSError as e:
            raise PersistenceUnavailable(
                f"Could not write tasks to {self.path}: {e}"
            ) from e
        logger.debug(f"Saved {len(snapshot)} dates to {self.path}")

    def _corrupt_path(self) -> Path:
        stamp = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        base = f"{self.path.name}.corrupt-{stamp}"
        candidate = self.path.with_name(base)
        n = 1
        while candidate.exists():
            candidate = self.path.with_name(f"{base}-{n}")
            n += 1
        return candidate

    def _quarantine(self) -> None:
        corrupt_path = self._corrupt_path()
        try:
            self.path.rename(corrupt_path)
            logger.warning(f"Kept unreadable slot as {corrupt_path}")
        except OSError as e:
            self.save_blocked = True
            logger.error(f"Failed to move unreadable slot aside, saving is disabled: {e}")
