from __future__ import annotations

from datetime import date, datetime, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def iso_day(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def iso_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds")


def plus_minutes_millis(moment: datetime, minutes: int) -> int:
    return epoch_millis(moment + timedelta(minutes=minutes))
