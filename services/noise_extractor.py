"""Filtering and parsing of raw WebTrak records into noise events."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence

from models.records import NoiseEvent
from services.errors import MalformedRecordError

NOISE_TAG = "noise"

# tag, time, station, <unused>, <unused>, level
_NOISE_FIELD_COUNT = 6


def record_tag(entry: str) -> str:
    return entry.split(",", 1)[0]


class NoiseExtractor:
    """Pure record handling that can be unit tested without the service."""

    def extract_noise(self, entries: Iterable[str]) -> List[str]:
        """Keep only entries tagged ``noise``, in their original order."""
        return [entry for entry in entries if record_tag(entry) == NOISE_TAG]

    def parse(self, entry: str) -> NoiseEvent:
        fields = entry.split(",")
        if len(fields) < _NOISE_FIELD_COUNT:
            raise MalformedRecordError(
                f"Noise record {entry!r} has {len(fields)} fields, expected {_NOISE_FIELD_COUNT}."
            )
        _, time, station, _, _, level_db = fields[:_NOISE_FIELD_COUNT]
        return NoiseEvent(time=time, station=station, level_db=level_db)

    def events(self, batches: Iterable[Sequence[str]]) -> Iterator[NoiseEvent]:
        """Lazily turn a stream of raw batches into noise events."""
        for entries in batches:
            for entry in self.extract_noise(entries):
                yield self.parse(entry)
