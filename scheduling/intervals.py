"""
Bookable time spans and the overlap predicate every other component relies on.

Boundaries are inclusive: a span ending at 10:00 overlaps one starting at 10:00,
so back-to-back bookings on the same resource are rejected.
"""
import datetime as dt
from dataclasses import dataclass
from typing import Optional

from .exceptions import InvalidInterval


@dataclass(frozen=True)
class Interval:
    date: Optional[dt.date]
    start: Optional[dt.time]
    end: Optional[dt.time]

    @property
    def duration_minutes(self) -> int:
        start = dt.datetime.combine(self.date, self.start)
        end = dt.datetime.combine(self.date, self.end)
        return int((end - start).total_seconds() // 60)

    def __str__(self):
        return f"{self.date} {self.start:%H:%M}-{self.end:%H:%M}"


def overlaps(a: Interval, b: Interval) -> bool:
    if a.date != b.date:
        return False
    return a.start <= b.end and b.start <= a.end


def validate(interval: Interval) -> None:
    if interval.date is None:
        raise InvalidInterval("Interval date is required", reason="missing_date")
    if interval.start is None or interval.end is None:
        raise InvalidInterval("Interval start and end are required", reason="missing_bound")
    if interval.start >= interval.end:
        raise InvalidInterval(
            f"Interval start {interval.start:%H:%M} must be before end {interval.end:%H:%M}",
            reason="start_not_before_end",
        )
