from __future__ import annotations

from datetime import date

import pytest

from settings import DEFAULT_BASE_URL, get_settings

_ENV_NAMES = (
    "WEBTRAK_BASE_URL",
    "WEBTRAK_OUTPUT_DIR",
    "WEBTRAK_UTC_OFFSET",
    "WEBTRAK_BACKFILL_START",
    "WEBTRAK_TIMEOUT",
    "WEBTRAK_RETRIES",
    "WEBTRAK_MAX_EMPTY_BATCHES",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults_match_sea_webtrak() -> None:
    settings = get_settings()

    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.output_dir == "."
    assert settings.utc_offset == "-0700"
    assert settings.backfill_start == date(2013, 6, 10)
    assert settings.retries == 2
    assert settings.max_empty_batches == 10
    assert settings.log_level == "INFO"


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("WEBTRAK_BASE_URL", "http://example.test/WebTrak/bos/data")
    monkeypatch.setenv("WEBTRAK_OUTPUT_DIR", str(tmp_path))
    monkeypatch.setenv("WEBTRAK_UTC_OFFSET", "-0400")
    monkeypatch.setenv("WEBTRAK_BACKFILL_START", "2014-01-06")
    monkeypatch.setenv("WEBTRAK_TIMEOUT", "12.5")
    monkeypatch.setenv("WEBTRAK_RETRIES", "0")
    monkeypatch.setenv("WEBTRAK_MAX_EMPTY_BATCHES", "4")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.base_url == "http://example.test/WebTrak/bos/data/"
    assert settings.output_dir == str(tmp_path)
    assert settings.utc_offset == "-0400"
    assert settings.backfill_start == date(2014, 1, 6)
    assert settings.timeout == 12.5
    assert settings.retries == 0
    assert settings.max_empty_batches == 4
    assert settings.log_level == "DEBUG"


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("WEBTRAK_BACKFILL_START", "last monday")
    monkeypatch.setenv("WEBTRAK_TIMEOUT", "-1")
    monkeypatch.setenv("WEBTRAK_RETRIES", "many")
    monkeypatch.setenv("WEBTRAK_MAX_EMPTY_BATCHES", "0")
    monkeypatch.setenv("WEBTRAK_OUTPUT_DIR", "   ")

    settings = get_settings()

    assert settings.backfill_start == date(2013, 6, 10)
    assert settings.timeout == 30.0
    assert settings.retries == 2
    assert settings.max_empty_batches == 10
    assert settings.output_dir == "."
