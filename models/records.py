"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from services.errors import MalformedRecordError


@dataclass(frozen=True, slots=True)
class EventTime:
    """A 14-digit ``YYYYMMDDHHMMSS`` timestamp split into its fields."""

    year: str
    month: str
    day: str
    hour: str
    minute: str
    second: str

    @classmethod
    def parse(cls, value: str) -> "EventTime":
        if len(value) != 14 or not value.isdigit():
            raise MalformedRecordError(f"Expected a 14-digit timestamp, got {value!r}.")
        return cls(
            year=value[0:4],
            month=value[4:6],
            day=value[6:8],
            hour=value[8:10],
            minute=value[10:12],
            second=value[12:14],
        )

    def isoformat(self, utc_offset: str) -> str:
        return (
            f"{self.year}-{self.month}-{self.day}"
            f"T{self.hour}:{self.minute}:{self.second}{utc_offset}"
        )


@dataclass(frozen=True, slots=True)
class NoiseEvent:
    """A single sound-level reading at a monitor station."""

    time: str
    station: str
    level_db: str

    def __iter__(self) -> Iterator[str]:
        yield self.time
        yield self.station
        yield self.level_db
