"""Value types for the task calendar.

- DateKey: canonical calendar date used to partition tasks
- TimeInterval: half-open [start, end) range of minutes within a day
- to_minutes / format_minutes / overlaps: wall-clock helpers
"""
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from .errors import InvalidDateKey, InvalidTimeFormat, InvalidTimeRange

_TIME_RE = re.compile(r"([0-9]{1,2}):([0-9]{2})")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}(?:[T ].*)?")

MINUTES_PER_DAY = 24 * 60


# ============== Wall-clock time ==============

def to_minutes(time: str) -> int:
    """Convert an ``HH:MM`` wall-clock string to minutes since midnight."""
    if not isinstance(time, str):
        raise InvalidTimeFormat(f"Expected HH:MM string, got {type(time).__name__}")
    match = _TIME_RE.fullmatch(time)
    if not match:
        raise InvalidTimeFormat(f"Invalid time format: {time!r} (expected HH:MM)")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if not 0 <= hours <= 23 or not 0 <= minutes <= 59:
        raise InvalidTimeFormat(f"Time out of range: {time!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight as zero-padded ``HH:MM``."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormat(f"Minute offset out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _as_minutes(value: str | int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return to_minutes(value)


def overlaps(
    a_start: str | int,
    a_end: str | int,
    b_start: str | int,
    b_end: str | int,
) -> bool:
    """Whether [a_start, a_end) and [b_start, b_end) intersect.

    Intervals that only touch at an endpoint do not overlap.
    """
    a0, a1 = _as_minutes(a_start), _as_minutes(a_end)
    b0, b1 = _as_minutes(b_start), _as_minutes(b_end)
    return a0 < b1 and b0 < a1


@dataclass(frozen=True)
class TimeInterval:
    """Half-open range of minutes within a single day."""
    start: int
    end: int

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeInterval":
        start_min, end_min = to_minutes(start), to_minutes(end)
        if end_min <= start_min:
            raise InvalidTimeRange(
                f"End time {end} must be after start time {start}"
            )
        return cls(start=start_min, end=end_min)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)

    def to_strings(self) -> tuple[str, str]:
        return format_minutes(self.start), format_minutes(self.end)


# ============== Calendar date ==============

@dataclass(frozen=True, order=True)
class DateKey:
    """Calendar date identifier.

    Two keys are equal iff their ``YYYY-MM-DD`` forms are equal; the time of
    day and UTC offset of a source datetime never take part.
    """
    value: date

    @classmethod
    def of(cls, source: Any) -> "DateKey":
        """Build a key from a DateKey, date, datetime or ``YYYY-MM-DD`` string."""
        if isinstance(source, DateKey):
            return source
        if isinstance(source, datetime):
            # wall-clock date of the instant as given, no tz conversion
            return cls(source.date())
        if isinstance(source, date):
            return cls(source)
        if isinstance(source, str):
            return cls.parse(source)
        raise InvalidDateKey(f"Cannot build a date key from {type(source).__name__}")

    @classmethod
    def parse(cls, text: str) -> "DateKey":
        text = text.strip()
        if not _DATE_RE.fullmatch(text):
            raise InvalidDateKey(f"Invalid date: {text!r} (expected YYYY-MM-DD)")
        try:
            return cls(date.fromisoformat(text[:10]))
        except ValueError as e:
            raise InvalidDateKey(f"Invalid date: {text!r} ({e})") from e

    @classmethod
    def today(cls) -> "DateKey":
        return cls(date.today())

    @property
    def year(self) -> int:
        return self.value.year

    @property
    def month(self) -> int:
        return self.value.month

    @property
    def day(self) -> int:
        return self.value.day

    def isoformat(self) -> str:
        return self.value.isoformat()

    def __str__(self) -> str:
        return self.value.isoformat()
