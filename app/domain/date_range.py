from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from app.errors import InvalidRangeError

ONE_DAY = timedelta(days=1)


def to_calendar_date(value: date | datetime, field: str = "date") -> date:
    """Normalize a date or timestamp to its local calendar day.

    Aware timestamps are converted to local time first so that a booking made
    late in the evening in another timezone does not land on the wrong day.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidRangeError(f"{field} is not a valid calendar date: {value!r}")


@dataclass(frozen=True, slots=True)
class DateRange:
    """An inclusive ``[start, end]`` span of calendar days.

    Both endpoints are occupied: a range ending on day D and another starting
    on day D overlap. Pricing uses the exclusive day difference instead (see
    ``duration_days_for_pricing``).
    """

    start: date
    end: date

    def __post_init__(self):
        start = to_calendar_date(self.start, "start")
        end = to_calendar_date(self.end, "end")
        if end < start:
            raise InvalidRangeError(
                f"End date ({end.isoformat()}) cannot precede start date ({start.isoformat()})"
            )
        # Frozen dataclass: normalized values are written back directly.
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    def overlaps(self, other: DateRange) -> bool:
        return self.start <= other.end and other.start <= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def duration_days(self) -> int:
        """Exclusive day difference ``end - start`` (0 for a same-day range)."""
        return (self.end - self.start).days

    def duration_days_for_pricing(self) -> int:
        # Same-day rentals bill one day.
        return max(1, self.duration_days)

    def expand_inclusive_days(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += ONE_DAY

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"
