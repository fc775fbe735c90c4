from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class DateWindow:
    label: str
    start: str
    end: str

    def as_params(self) -> dict[str, str]:
        return {"from": self.start, "to": self.end}


def next_day(day: str) -> str:
    return (date.fromisoformat(day) + timedelta(days=1)).isoformat()


def whole_day_windows(day: str) -> list[DateWindow]:
    """Whole-day ranges in the encodings Planday has been seen to accept, in trial order."""
    following = next_day(day)
    return [
        DateWindow("seconds", f"{day}T00:00:00", f"{following}T00:00:00"),
        DateWindow("date-only", day, following),
        DateWindow("minutes", f"{day}T00:00", f"{following}T00:00"),
    ]


def half_day_windows(day: str) -> list[DateWindow]:
    # Two half-day ranges split at noon.
    following = next_day(day)
    return [
        DateWindow("morning", f"{day}T00:00:00", f"{day}T12:00:00"),
        DateWindow("afternoon", f"{day}T12:00:00", f"{following}T00:00:00"),
    ]
