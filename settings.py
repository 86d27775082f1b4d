from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache


_BASE_URL_ENV = "WEBTRAK_BASE_URL"
_OUTPUT_DIR_ENV = "WEBTRAK_OUTPUT_DIR"
_UTC_OFFSET_ENV = "WEBTRAK_UTC_OFFSET"
_BACKFILL_START_ENV = "WEBTRAK_BACKFILL_START"
_TIMEOUT_ENV = "WEBTRAK_TIMEOUT"
_RETRIES_ENV = "WEBTRAK_RETRIES"
_MAX_EMPTY_ENV = "WEBTRAK_MAX_EMPTY_BATCHES"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_BASE_URL = "http://ems02.bksv.com/WebTrak/sea2/data/"
DEFAULT_BACKFILL_START = date(2013, 6, 10)


@dataclass(frozen=True)
class Settings:
    base_url: str
    output_dir: str
    utc_offset: str
    backfill_start: date
    timeout: float
    retries: int
    max_empty_batches: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_int_env(name: str, default: int, minimum: int = 0) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _read_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_date_env(name: str, default: date) -> date:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _normalize_base_url(url: str) -> str:
    # Relative chunk paths are joined onto the root, so it must end in a slash.
    return url if url.endswith("/") else f"{url}/"


@lru_cache
def get_settings() -> Settings:
    return Settings(
        base_url=_normalize_base_url(_read_str_env(_BASE_URL_ENV, DEFAULT_BASE_URL)),
        output_dir=_read_str_env(_OUTPUT_DIR_ENV, "."),
        utc_offset=_read_str_env(_UTC_OFFSET_ENV, "-0700"),
        backfill_start=_read_date_env(_BACKFILL_START_ENV, DEFAULT_BACKFILL_START),
        timeout=_read_float_env(_TIMEOUT_ENV, 30.0),
        retries=_read_int_env(_RETRIES_ENV, 2),
        max_empty_batches=_read_int_env(_MAX_EMPTY_ENV, 10, minimum=1),
        log_level=_read_log_level("INFO"),
    )
