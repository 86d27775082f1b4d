"""Exception types raised while talking to WebTrak and parsing its records."""

from __future__ import annotations


class WebTrakError(Exception):
    """Base exception for all noise extraction failures."""


class ProtocolError(WebTrakError):
    """Raised when a response does not carry the expected data envelope."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedRecordError(WebTrakError):
    """Raised for a record that cannot be split into its positional fields."""
