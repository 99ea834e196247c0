from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

DATE_FORMAT = "%Y-%m-%d"


def format_date(d) -> str:
    """Format a date/datetime as YYYY-MM-DD (datetimes are converted to UTC first)."""
    if isinstance(d, datetime):
        if d.tzinfo is not None:
            d = d.astimezone(timezone.utc)
        d = d.date()
    return d.strftime(DATE_FORMAT)


def parse_date(point: str) -> date:
    return datetime.strptime(point, DATE_FORMAT).date()


def offset_days_formatted(point: str, days: int) -> str:
    return format_date(parse_date(point) + timedelta(days=days))


def start_of_day_ts(point: str) -> int:
    """Unix timestamp of UTC midnight at the start of the given day."""
    d = parse_date(point)
    return int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp())


class DateHelper:
    """
    Date utility handed to the adapter. Points in time are YYYY-MM-DD strings in UTC.
    `clock` can be swapped out (e.g. in tests) to pin "now".
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def today(self) -> str:
        return format_date(self.clock())

    def offset_days(self, point: str, days: int) -> str:
        return offset_days_formatted(point, days)
