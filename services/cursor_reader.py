"""Handle-based cursor client for the WebTrak noise data stream.

WebTrak serves its event stream in numbered chunks ("handles").  A day's
data is located by asking the service for the handle range that covers
midnight, then fetching successive handles until a chunk ends past the
start of the following day.

The start handle reported by the service can point at data that begins
after midnight, dropping the early-morning records.  The reader therefore
starts one handle earlier; the first chunk may contain records from the
previous day and callers must discard them by timestamp.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator, List, Optional

import httpx

from services.errors import MalformedRecordError, ProtocolError
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

_DATA_MARKER = re.compile(r"<data")
_START_HANDLE = re.compile(r'startHandle="(?P<value>[^"]*)"')
_END_HANDLE = re.compile(r'endHandle="(?P<value>[^"]*)"')
_ENVELOPE = re.compile(r"<data[^>]+>(?P<body>.*?)</data>", re.DOTALL)

_BODY_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class HandleRange:
    """Handle range reported by the service for a discovery query."""

    start: int
    end: Optional[int] = None


def discovery_path(day: date) -> str:
    # The service wants the space before the time already percent-encoded.
    return day.strftime("handle/%Y-%m-%d%%2000:00:00")


def boundary_timestamp(day: date) -> str:
    """First instant of the following day, in the record timestamp format."""
    return (day + timedelta(days=1)).strftime("%Y%m%d000000")


def trailing_timestamp(entry: str) -> str:
    fields = entry.split(",")
    if len(fields) < 2:
        raise MalformedRecordError(f"Record {entry!r} has no timestamp field.")
    return fields[1]


def _preview(body: str) -> str:
    text = body.strip()
    if len(text) > _BODY_PREVIEW_CHARS:
        return text[:_BODY_PREVIEW_CHARS] + "..."
    return text


class HandleCursorReader:
    """Walks the WebTrak handle stream for one calendar day at a time."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._max_empty_batches = self._settings.max_empty_batches
        if client is None:
            transport = httpx.HTTPTransport(retries=self._settings.retries)
            client = httpx.Client(
                base_url=self._settings.base_url,
                timeout=self._settings.timeout,
                transport=transport,
            )
        self._client = client

    def __enter__(self) -> "HandleCursorReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def handle_range(self, day: date) -> HandleRange:
        """Ask the service which handles cover ``day`` from midnight onwards."""
        body = self._get(discovery_path(day))
        if not _DATA_MARKER.search(body):
            raise ProtocolError(f"Handle discovery returned no data envelope: {_preview(body)}")

        start_match = _START_HANDLE.search(body)
        if start_match is None:
            raise ProtocolError(f"Handle discovery is missing startHandle: {_preview(body)}")
        end_match = _END_HANDLE.search(body)

        start = self._parse_handle(start_match.group("value"))
        end = self._parse_handle(end_match.group("value")) if end_match else None
        return HandleRange(start=start, end=end)

    def start_handle(self, day: date) -> int:
        """Return the handle to begin walking from, one before the reported start."""
        return self.handle_range(day).start - 1

    def load_handle(self, handle: int) -> List[str]:
        """Fetch the chunk at ``handle`` and split its payload into raw entries."""
        body = self._get(str(handle))
        match = _ENVELOPE.search(body)
        if match is None:
            raise ProtocolError(f"Handle {handle} returned no data envelope: {_preview(body)}")

        entries = match.group("body").split()
        logger.info("Loaded chunk", extra={"handle": handle, "entry_count": len(entries)})
        return entries

    def load_handles(self, day: date) -> Iterator[List[str]]:
        """Yield every chunk from the start handle up to the one that ends past ``day``.

        The chunk whose last record reaches the boundary is yielded before the
        walk stops.  Empty chunks carry no timestamp, so the walk moves on to
        the next handle, giving up after ``max_empty_batches`` in a row.
        """
        handle = self.start_handle(day)
        boundary = boundary_timestamp(day)
        empty_run = 0

        while True:
            entries = self.load_handle(handle)
            yield entries

            if entries:
                empty_run = 0
                if trailing_timestamp(entries[-1]) >= boundary:
                    return
            else:
                empty_run += 1
                logger.warning(
                    "Empty chunk",
                    extra={"handle": handle, "reason": f"{empty_run} consecutive"},
                )
                if empty_run >= self._max_empty_batches:
                    raise ProtocolError(
                        f"Gave up after {empty_run} consecutive empty chunks ending at handle {handle}."
                    )

            handle += 1

    def _get(self, path: str) -> str:
        response = self._client.get(path)
        if response.is_error:
            logger.error(
                "WebTrak request failed",
                extra={"status_code": response.status_code, "reason": path},
            )
            raise ProtocolError(
                f"Request for {path} failed with status {response.status_code}: {_preview(response.text)}",
                status_code=response.status_code,
            )
        return response.text

    @staticmethod
    def _parse_handle(value: str) -> int:
        try:
            return int(value)
        except ValueError as exc:
            raise ProtocolError(f"Handle value {value!r} is not an integer.") from exc
