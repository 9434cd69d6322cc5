"""Data models for calendar tasks."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
import uuid

from .types import TimeInterval


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Task:
    """A time-boxed task attached to one calendar date.

    Instances are immutable; the store hands out the same objects it keeps.
    """
    title: str
    starttime: str
    endtime: str
    description: str = ""

    # Identity
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_now)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.parse(self.starttime, self.endtime)

    def matches(self, search_term: str) -> bool:
        """Case-insensitive substring match over title or description."""
        needle = search_term.lower()
        return needle in self.title.lower() or needle in self.description.lower()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted wire format."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "starttime": self.starttime,
            "endtime": self.endtime,
            "createdAt": self.created_at.isoformat(),
        }
