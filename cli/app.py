from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

import httpx
import typer

from logging_config import configure_logging
from services.cursor_reader import HandleCursorReader
from services.daily_writer import DailyWriter
from services.errors import WebTrakError
from services.schedule import backfill_dates
from settings import get_settings

app = typer.Typer(
    help="Download WebTrak noise monitor data into daily CSV files.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


def _today() -> date:
    return date.today()


def _write_days(days: Iterable[date]) -> None:
    settings = get_settings()
    with HandleCursorReader(settings) as reader:
        writer = DailyWriter(reader, settings=settings)
        for day in days:
            summary = writer.write(day)
            typer.echo(f"{summary.path}: {summary.written} events")


@app.command()
def main(
    day: Optional[datetime] = typer.Argument(
        None,
        formats=["%Y-%m-%d"],
        help="Date to download. Without it every Monday since the backfill start is written.",
        show_default=False,
    ),
) -> None:
    """Write the noise events for one day, or backfill one day per week."""
    configure_logging()
    if day is not None:
        days: Iterable[date] = [day.date()]
    else:
        days = backfill_dates(get_settings().backfill_start, _today())

    try:
        _write_days(days)
    except (WebTrakError, httpx.HTTPError) as exc:
        typer.secho(f"Noise download failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
